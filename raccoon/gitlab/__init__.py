"""GitLab webhook event decoding and notification rendering."""

from __future__ import annotations

from .dispatch import dispatch
from .errors import GitLabEventError, MalformedPayloadError, UnknownEventKindError
from .models import EVENT_KINDS, GitLabEvent
from .parser import decode_event, object_kind
from .render import render

__all__ = [
    "EVENT_KINDS",
    "GitLabEvent",
    "GitLabEventError",
    "MalformedPayloadError",
    "UnknownEventKindError",
    "decode_event",
    "dispatch",
    "object_kind",
    "render",
]
