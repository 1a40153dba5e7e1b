"""Pack sanitized repository files into a single plain or XML document."""

__version__ = "0.1.0"
