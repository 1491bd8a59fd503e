"""BookBurst: reading tracker and book community API."""

__version__ = "1.0.0"
