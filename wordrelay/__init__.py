"""Framing, JSON-over-HTTP messages and incremental HTTP and URL parsers for a text relay protocol."""

__version__ = "0.1.0"