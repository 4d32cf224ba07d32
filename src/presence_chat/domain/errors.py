"""Errors raised by the chat services."""


class ChatError(Exception):
    """Base class for chat domain errors."""


class ValidationError(ChatError):
    """Malformed or missing field. Never retried."""


class UnprocessableAuthor(ChatError):
    """Identity header names nobody currently present."""


class Conflict(ChatError):
    """Participant name already taken."""


class NotFound(ChatError):
    """Unknown participant or message."""


class Forbidden(ChatError):
    """Requester is not allowed to touch this message."""


class StorageError(ChatError):
    """Underlying persistence fault."""
