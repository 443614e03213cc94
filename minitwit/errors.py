"""Error taxonomy shared by the MiniTwit services."""


class MiniTwitError(Exception):
    """Base class for all MiniTwit failures."""


class NotFound(MiniTwitError):
    """A referenced username or user does not exist."""


class Unauthorized(MiniTwitError):
    """An anonymous caller attempted an identity-gated action."""


class ValidationError(MiniTwitError):
    """Registration input violates a rule."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


class InvalidCredentials(MiniTwitError):
    """Login lookup or password verification failed."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


class StorageError(MiniTwitError):
    """The database was unavailable or failed unexpectedly."""


class HashingError(MiniTwitError):
    """Password hashing failed for internal reasons."""
