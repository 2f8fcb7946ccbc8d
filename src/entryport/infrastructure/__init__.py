"""Infrastructure layer — content stores, the host value codec, and SQLite persistence.

This layer may import from domain but never from handlers, services, or commands.
"""
