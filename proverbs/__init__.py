"""Proverbs - verse store with embedding ingestion and similarity search."""

__version__ = "1.0.0"
