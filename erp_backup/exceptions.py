"""Error taxonomy for the backup/restore engine."""

from typing import Iterable


class BackupError(Exception):
    """Base class for every error raised by the engine."""


class StoreUnavailable(BackupError):
    def __init__(self, backend: str, reason: str = ""):
        self.backend = backend
        message = f"{backend} store unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class WriteFailure(BackupError):
    """A chunk commit was rejected by the store."""

    def __init__(self, collection: str, chunk_index: int, reason: str = ""):
        self.collection = collection
        self.chunk_index = chunk_index
        message = f"Write to '{collection}' failed at chunk {chunk_index}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RestoreInProgress(BackupError):
    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"A restore is already running against store {identity}")


class ArtifactValidationError(BackupError):
    """Base class for artifact validation failures."""


class MalformedArtifact(ArtifactValidationError):
    pass


class MissingVersion(ArtifactValidationError):
    def __init__(self):
        super().__init__("Backup metadata has no version")


class IncompatibleVersion(ArtifactValidationError):
    def __init__(self, found: str, expected: str):
        self.found = found
        self.expected = expected
        super().__init__(
            f"Backup version ({found}) is not compatible with the current version ({expected})"
        )


class MissingCollections(ArtifactValidationError):
    def __init__(self):
        super().__init__("Backup has no collections mapping")


class UnknownCollections(ArtifactValidationError):
    def __init__(self, names: Iterable[str]):
        self.names = list(names)
        super().__init__(f"Unknown collections: {', '.join(self.names)}")


class EmptyConversion(BackupError):
    def __init__(self):
        super().__init__("No importable rows were found in the foreign export")
