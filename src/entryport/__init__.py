"""entryport — round-trip content records through a normalized JSON document."""

__version__ = "0.1.0"
