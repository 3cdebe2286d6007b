"""Infrastructure layer: descriptor files, templates, disk writes, PyPI.

This layer depends on stdlib and third-party libs (ruamel.yaml, Jinja2,
httpx) and on the domain layer.  It must never import from services,
commands, or output.
"""
