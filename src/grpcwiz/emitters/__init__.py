"""Emitters: render records into schema, converter, adapter, and proxy text.

Emitters only read records and return strings.  Placing the text on disk
is the writer's job (:mod:`grpcwiz.infrastructure.writer`).
"""
