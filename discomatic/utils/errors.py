"""Custom exceptions used across discomatic."""

from __future__ import annotations


class DiscomaticError(RuntimeError):
    """Base class for errors raised by discomatic."""

    pass


class ConfigurationError(DiscomaticError):
    """Raised when a dump cannot start because the setup is unusable."""

    pass


class HasherStateError(DiscomaticError):
    """Raised when a :class:`~discomatic.utils.hashing.Hasher` is misused."""

    pass


class CatalogError(DiscomaticError):
    """Raised when the remote catalog returns something unusable."""

    pass


class CatalogConnectionError(CatalogError):
    """Raised when the remote catalog cannot be reached at all."""

    pass
