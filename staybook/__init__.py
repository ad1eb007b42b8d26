"""StayBook booking engine: quotes, availability and reservation lifecycle."""

__version__ = "0.1.0"
