"""HTTP message builders, HPACK header compression and HTTP/2 frame parsing."""

__version__ = "1.0.0"

__all__ = ["builder", "h2parser", "h2types", "hpack", "hpack_tables", "messages"]