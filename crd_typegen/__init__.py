"""Generate TypeScript declarations from API type declaration graphs."""

__version__ = "0.1.0"
