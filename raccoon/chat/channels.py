"""Parse configured channel entries of the form ``name`` or ``name:key``."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def split_channel_keys(
    entries: cabc.Iterable[str],
) -> tuple[list[str], dict[str, str]]:
    """Split channel entries into channel names and their join keys.

    >>> split_channel_keys(["#a:pw", "#b"])
    (['#a', '#b'], {'#a': 'pw'})

    Only the text between the first and second ``:`` is used as the key, and
    an empty key is treated as no key.
    """
    channels: list[str] = []
    keys: dict[str, str] = {}
    for entry in entries:
        name, *rest = entry.split(":")
        channels.append(name)
        if rest and rest[0]:
            keys[name] = rest[0]
    return channels, keys


__all__ = ["split_channel_keys"]
