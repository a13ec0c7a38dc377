"""Rate-limited, batching proxy for an email verification API."""

__version__ = "1.0.0"
