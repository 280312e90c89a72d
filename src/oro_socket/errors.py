"""
Socket-related exceptions.
"""


class SocketError(Exception):
    """Base exception for socket errors."""

    pass


class TransportUnsupportedError(SocketError):
    """Raised at construction when the runtime cannot host a transport."""

    pass


class TransportError(SocketError):
    """Raised by a transport handle that cannot carry a message."""

    pass


class ConfigurationError(SocketError, ValueError):
    """Raised when supervisor configuration is invalid."""

    pass
