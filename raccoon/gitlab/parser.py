"""Decode raw GitLab webhook payloads into typed event records."""

from __future__ import annotations

import typing as typ

import msgspec

from .errors import MalformedPayloadError, UnknownEventKindError
from .models import EVENT_TYPES

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import GitLabEvent


def object_kind(payload: cabc.Mapping[str, typ.Any]) -> str | None:
    """Return the payload's ``object_kind`` discriminant, if it is a string."""
    kind = payload.get("object_kind")
    return kind if isinstance(kind, str) else None


def decode_event(kind: str | None, payload: cabc.Mapping[str, typ.Any]) -> GitLabEvent:
    """Decode ``payload`` as the event record registered for ``kind``.

    Parameters
    ----------
    kind : str | None
        Event discriminant, usually :func:`object_kind` of the payload.
    payload : Mapping[str, Any]
        Decoded JSON object received from GitLab.

    Returns
    -------
    GitLabEvent
        The fully decoded, immutable event record.

    Raises
    ------
    UnknownEventKindError
        If ``kind`` is not one of the supported event kinds.
    MalformedPayloadError
        If the payload is missing a required field or a field has the wrong
        type for ``kind``.

    """
    if kind is None or kind not in EVENT_TYPES:
        raise UnknownEventKindError(kind)

    try:
        return typ.cast(
            "GitLabEvent", msgspec.convert(payload, type=EVENT_TYPES[kind])
        )
    except msgspec.ValidationError as exc:
        raise MalformedPayloadError(kind, str(exc)) from exc


__all__ = ["decode_event", "object_kind"]
