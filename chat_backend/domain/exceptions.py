# chat_backend/domain/exceptions.py


class ChatError(Exception):
    """Base class for errors that are reported back to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(ChatError):
    """Missing, malformed, invalid or expired credential."""


class AuthorizationError(ChatError):
    """Authenticated, but not entitled to the operation."""


class ValidationError(ChatError):
    """Malformed payload, rejected before touching storage."""


class NotFoundError(ChatError):
    """Referenced chat, message or user does not exist."""


class PersistenceError(ChatError):
    """The datastore call failed."""
