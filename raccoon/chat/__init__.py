"""IRC session management and outbound notification delivery."""

from __future__ import annotations

from .channels import split_channel_keys
from .errors import ChatError, OutboundDeliveryError, SessionBootstrapError
from .session import IrcSession, SessionManager, SessionState
from .writer import IrcWriter, NotificationWriter, RecordingWriter

__all__ = [
    "ChatError",
    "IrcSession",
    "IrcWriter",
    "NotificationWriter",
    "OutboundDeliveryError",
    "RecordingWriter",
    "SessionBootstrapError",
    "SessionManager",
    "SessionState",
    "split_channel_keys",
]
