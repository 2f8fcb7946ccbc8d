"""Domain layer — field schemas, live values, records, and wire documents.

This layer depends only on stdlib and pydantic.
It must never import from handlers, services, infrastructure, commands, or config.
"""
