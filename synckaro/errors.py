"""Exception types for SyncKaro.

Expected conditions (missing records, illegal transitions, invalid rows) are
returned as values by the services. These exceptions cover the failures
that callers cannot recover from locally.
"""


class SyncKaroError(Exception):
    """Base class for all SyncKaro errors."""


class ConfigError(SyncKaroError):
    """Raised when the configuration file cannot be parsed."""


class StorageError(SyncKaroError):
    """Raised when a stored collection cannot be decoded into models."""
