"""Custom exceptions for mperf."""


class MperfError(Exception):
    """Base exception for mperf."""
    pass


class ConfigurationError(MperfError):
    """Exception raised when a run option is missing or out of range."""
    pass


class BootstrapError(MperfError):
    """Exception raised when the session root directory cannot be created."""
    pass


class StorageError(MperfError):
    """Exception raised when an object store operation fails."""
    pass


class MissingParentDirectoryError(StorageError):
    """Exception raised when an object is written under a directory that does not exist."""
    pass


class TransientUploadError(StorageError):
    """Exception raised when an upload fails for any other reason."""
    pass


class HealError(MperfError):
    """Exception raised when a missing directory could not be created."""
    pass


class GateInvariantError(RuntimeError):
    """Raised when an admission slot is released that was never acquired."""
    pass
