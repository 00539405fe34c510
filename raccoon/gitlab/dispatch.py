"""Single entry point from a GitLab payload to a notification line."""

from __future__ import annotations

import typing as typ

from .errors import UnknownEventKindError
from .parser import decode_event
from .render import render

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def dispatch(kind: str | None, payload: cabc.Mapping[str, typ.Any]) -> str | None:
    """Render the notification for ``payload`` decoded as ``kind``.

    Parameters
    ----------
    kind : str | None
        The payload's ``object_kind``; ``None`` when it is absent.
    payload : Mapping[str, Any]
        Decoded JSON object received from GitLab.

    Returns
    -------
    str | None
        The rendered line, or ``None`` when ``kind`` is not a supported event
        kind and there is nothing to forward.

    Raises
    ------
    MalformedPayloadError
        If ``kind`` is supported but the payload does not match its schema.

    """
    try:
        event = decode_event(kind, payload)
    except UnknownEventKindError:
        return None
    return render(event)


__all__ = ["dispatch"]
