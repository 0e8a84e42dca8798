"""
Error taxonomy of the synchronization core.

None of these is allowed to terminate the process. 'ConfigError' is fatal to
the session only; every other error degrades the affected view while the rest
of the board stays usable.
"""


class ClassBoardError(Exception):
    """Base class for every error raised by the core."""


class ConfigError(ClassBoardError):
    """Malformed backend configuration at startup. Not retried."""


class AuthError(ClassBoardError):
    """A sign-in call against the identity provider failed."""


class SubscriptionError(ClassBoardError):
    """A watch reported an error and stopped delivering snapshots."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class ValidationError(ClassBoardError):
    """Input rejected before any remote call was made."""


class WriteError(ClassBoardError):
    """A remote write failed. Reported asynchronously, never retried."""
