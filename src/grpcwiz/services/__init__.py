"""Service layer: orchestration returning ServiceResult.

Services may import from domain, emitters, config, and infrastructure.
They must never import from commands or output.
"""
