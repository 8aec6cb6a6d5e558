"""Parse card payment notices, classify spending by type, and report consumption summaries."""

__version__ = "0.1.0"