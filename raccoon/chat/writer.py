"""Outbound notification writers.

A :class:`NotificationWriter` accepts one rendered notification and delivers
it to every channel the chat session has joined. The HTTP layer depends only
on this protocol, so tests substitute :class:`RecordingWriter`.
"""

from __future__ import annotations

import threading
import typing as typ

import irc.client

from raccoon.logging import get_logger, log_error

from .errors import OutboundDeliveryError

if typ.TYPE_CHECKING:
    from .session import IrcSession

__all__ = ["IrcWriter", "NotificationWriter", "RecordingWriter"]

logger = get_logger(__name__)


@typ.runtime_checkable
class NotificationWriter(typ.Protocol):
    """Deliver a notification line to the chat network."""

    def write(self, message: str) -> int:
        """Post ``message`` to every joined channel.

        Returns
        -------
        int
            Number of channels the message was posted to; ``0`` when no
            channel has been joined yet and the message was dropped.

        Raises
        ------
        OutboundDeliveryError
            Naming the first channel that could not be written to.

        """
        ...


class IrcWriter:
    """Fan notifications out to the channels of a live IRC session.

    Writes are serialised with a lock held for the duration of a single
    :meth:`write` call, and each line goes out under the session's send
    guard, so at most one send is in flight per session. A failing channel
    does not stop delivery to the remaining ones; the first failure is
    raised once every channel has been tried.
    """

    def __init__(self, session: IrcSession) -> None:
        """Wrap a session published by the session manager."""
        self._session = session
        self._lock = threading.Lock()

    def write(self, message: str) -> int:
        """Send each line of ``message`` to every joined channel."""
        lines = [line for line in message.splitlines() if line.strip()]
        first_failure: OutboundDeliveryError | None = None
        with self._lock:
            channels = self._session.channels()
            if not channels:
                return 0
            for channel in channels:
                try:
                    for line in lines:
                        self._session.send(channel, line)
                except (irc.client.IRCError, ValueError, OSError) as exc:
                    log_error(logger, "Failed to post to %s: %s", channel, exc)
                    if first_failure is None:
                        first_failure = OutboundDeliveryError(channel, exc)
        if first_failure is not None:
            raise first_failure
        return len(channels)


class RecordingWriter:
    """Writer that keeps every message in memory instead of sending it."""

    def __init__(self) -> None:
        """Start with no recorded messages."""
        self.messages: list[str] = []
        self._lock = threading.Lock()

    def write(self, message: str) -> int:
        """Record ``message`` as if posted to one channel."""
        with self._lock:
            self.messages.append(message)
        return 1

    def contains(self, fragment: str) -> bool:
        """Return whether any recorded message contains ``fragment``."""
        with self._lock:
            return any(fragment in message for message in self.messages)
