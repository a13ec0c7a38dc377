"""Exceptions raised by the verification services."""

from verify_proxy.config.constants import SHUTTING_DOWN_MESSAGE


class ProxyError(Exception):
    """Base class for proxy service errors."""


class BatchValidationError(ProxyError, ValueError):
    """A batch request is structurally invalid (empty or too large)."""


class ShutdownRejectedError(ProxyError):
    """A submission arrived after the queue started draining."""

    def __init__(self, message: str = SHUTTING_DOWN_MESSAGE):
        super().__init__(message)
