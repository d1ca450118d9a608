"""Domain exceptions."""


class AvatarVoiceError(Exception):
    """Base exception for the avatar voice layer."""

    pass


class InvalidArgumentError(AvatarVoiceError, ValueError):
    """An argument was rejected (empty name, bad value)."""

    pass


class IndexOutOfRangeError(InvalidArgumentError, IndexError):
    """A reorder index lies outside the voice list."""

    def __init__(self, name: str, index: int, length: int):
        self.name = name
        self.index = index
        self.length = length
        super().__init__(f"{name} {index} out of range for {length} voices")


class NotFoundError(AvatarVoiceError, LookupError):
    """Resource not found."""

    def __init__(self, resource_type: str, identifier: str):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} not found: {identifier}")


class PersistenceError(AvatarVoiceError):
    """The metadata store could not be read or written."""

    pass


class BlobError(AvatarVoiceError):
    """A blob store operation failed."""

    pass


class DecodeError(AvatarVoiceError):
    """The stored collection document could not be parsed."""

    pass


class DeletionInProgressError(AvatarVoiceError):
    """A destructive operation is already running."""

    pass


class RepositoryStateError(AvatarVoiceError):
    """The repository cannot accept mutations in its current state."""

    pass
