"""Custom exceptions for keepup."""


class KeepupError(Exception):
    """Base exception for all keepup operations."""


class ConfigurationError(KeepupError):
    """Raised when configuration validation fails."""


class CacheLookupError(KeepupError):
    """Raised when a package cannot be resolved from the EOL cache, even after a refresh."""


class CacheFormatError(KeepupError):
    """Raised when the cached EOL document cannot be parsed."""


class EOLDecodeError(KeepupError):
    """Raised when an upstream EOL value is neither a string nor a boolean."""


class ExternalFetchError(KeepupError):
    """Raised when fetching release data from the upstream EOL source fails."""


class MarshalError(KeepupError):
    """Raised when a record cannot be serialized or deserialized."""


class StoreWriteError(KeepupError):
    """Raised when writing to the key-value store fails."""


class StoreReadError(KeepupError):
    """Raised when reading from the key-value store fails."""


class RecordNotFoundError(KeepupError):
    """Raised when no record exists for the requested identifier."""


class AuthenticationError(KeepupError):
    """Raised when a request carries a missing or wrong API token."""
