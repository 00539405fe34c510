"""Chat session and delivery errors."""

from __future__ import annotations


class ChatError(Exception):
    """Base class for chat session errors."""


class SessionBootstrapError(ChatError):
    """Raised when the IRC session fails before the server welcomes it."""

    @classmethod
    def connect_failed(cls, server: str, port: int, cause: object) -> SessionBootstrapError:
        """Return an error for a connection that could not be opened."""
        return cls(f"failed to connect to IRC server {server}:{port}: {cause}")

    @classmethod
    def closed_before_welcome(cls, reason: object) -> SessionBootstrapError:
        """Return an error for a connection lost during registration."""
        return cls(f"IRC connection closed before registration completed: {reason}")

    @classmethod
    def timed_out(cls, timeout: float) -> SessionBootstrapError:
        """Return an error for a welcome that did not arrive in time."""
        return cls(f"IRC server did not accept registration within {timeout:g}s")


class OutboundDeliveryError(ChatError):
    """Raised when a notification could not be posted to a channel.

    Attributes
    ----------
    channel
        The first channel the message could not be delivered to.
    cause
        The underlying exception.

    """

    def __init__(self, channel: str, cause: BaseException) -> None:
        """Initialise with the failing channel and its cause."""
        self.channel = channel
        self.cause = cause
        super().__init__(f"failed to post message to {channel}: {cause}")
