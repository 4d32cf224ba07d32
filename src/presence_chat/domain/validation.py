"""Input sanitization and payload validation."""

import re
from typing import Any, Optional

from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .models import CHAT_KINDS, MessageKind

_TAG_RE = re.compile(r"<[^>]*>")
_DIGITS_RE = re.compile(r"\d+", re.ASCII)


def sanitize(value: Optional[str]) -> str:
    """Strip HTML tags and surrounding whitespace."""
    if value is None:
        return ""
    return _TAG_RE.sub("", value).strip()


def clean_name(value: Any) -> str:
    """Sanitize a participant name, rejecting empty results."""
    if not isinstance(value, str):
        raise ValidationError("name must be a string")
    name = sanitize(value)
    if not name:
        raise ValidationError("name must not be empty")
    return name


class MessageDraft(BaseModel):
    """Validated recipient/text/kind of a chat message."""

    to: str
    text: str
    kind: MessageKind

    @field_validator("to", "text", mode="before")
    @classmethod
    def _non_empty(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("must be a string")
        value = sanitize(value)
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("kind")
    @classmethod
    def _chat_kind(cls, value: MessageKind) -> MessageKind:
        if value not in CHAT_KINDS:
            raise ValueError("type must be message or private_message")
        return value


def parse_draft(to: Any, text: Any, kind: Any) -> MessageDraft:
    """Build a draft, turning pydantic errors into domain validation errors."""
    try:
        return MessageDraft(to=to, text=text, kind=kind)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e


def parse_limit(raw: Any, default: int = 100) -> int:
    """Parse a read limit; it must be a positive integer."""
    if raw is None:
        return default
    if isinstance(raw, bool):
        raise ValidationError("limit must be a positive integer")
    if isinstance(raw, int):
        limit = raw
    elif isinstance(raw, str):
        if not _DIGITS_RE.fullmatch(raw.strip()):
            raise ValidationError(f"limit must be a positive integer, got {raw!r}")
        limit = int(raw.strip())
    else:
        raise ValidationError("limit must be a positive integer")
    if limit <= 0:
        raise ValidationError(f"limit must be a positive integer, got {limit}")
    return limit
