"""Storage error types."""


class StorageError(Exception):
    """Base class for goal storage failures."""


class StorageInitError(StorageError):
    """Storage could not be opened or its schema created."""


class StorageReadError(StorageError):
    """Reading from storage failed."""


class StorageWriteError(StorageError):
    """Writing to storage failed."""
