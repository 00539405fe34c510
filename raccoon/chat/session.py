"""IRC session bootstrap and the background protocol loop.

The :class:`SessionManager` connects to the IRC server on a dedicated thread
which then runs the ``irc`` reactor for the lifetime of the process. When the
server welcomes the client, the manager joins the configured channels and
publishes an :class:`IrcSession` handle through a one-shot future. The
request-serving path blocks on :meth:`SessionManager.wait_ready` once at
start-up and afterwards only talks to the session through a writer.

Usage
-----
Bootstrap the session at process start::

    manager = SessionManager(settings.irc)
    manager.start()
    session = manager.wait_ready()
    writer = IrcWriter(session)

"""

from __future__ import annotations

import concurrent.futures
import enum
import functools
import ssl
import threading
import typing as typ

import irc.client
import irc.connection

from raccoon.logging import get_logger, log_error, log_exception, log_info, log_warning

from .channels import split_channel_keys
from .errors import SessionBootstrapError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from raccoon.config import IrcSettings

__all__ = ["IrcSession", "SessionManager", "SessionState"]

logger = get_logger(__name__)

NICKSERV: typ.Final = "NickServ"
_LOOP_TICK_SECONDS: typ.Final = 0.2
_QUIT_MESSAGE: typ.Final = "Raccoon shutting down"


class SessionState(enum.StrEnum):
    """Lifecycle of the IRC session."""

    BOOTSTRAPPING = "bootstrapping"
    AWAITING_WELCOME = "awaiting_welcome"
    JOINING = "joining"
    READY = "ready"
    FAILED = "failed"


class IrcSession:
    """A registered IRC connection and the channels it has joined.

    The roster is updated by the reactor thread and read by writers on the
    request path, so every access goes through ``_roster_lock``.
    """

    def __init__(self, connection: irc.client.ServerConnection) -> None:
        """Wrap ``connection``; the roster starts empty."""
        self._connection = connection
        self._roster: dict[str, str] = {}
        self._roster_lock = threading.Lock()

    @property
    def nickname(self) -> str:
        """Return the nickname the server currently knows us by."""
        return self._connection.get_nickname()

    def is_connected(self) -> bool:
        """Return whether the underlying socket is still connected."""
        return self._connection.is_connected()

    def channels(self) -> list[str]:
        """Return a snapshot of the joined channels in join order."""
        with self._roster_lock:
            return list(self._roster.values())

    def send(self, channel: str, message: str) -> None:
        """Send ``message`` to ``channel`` as a PRIVMSG.

        The send holds the reactor mutex, which the protocol loop also holds
        while its handlers (PONG, JOIN, greetings) write to the socket.

        Raises
        ------
        irc.client.ServerNotConnectedError
            If the connection was already closed, or was dropped because the
            socket failed during this send.

        """
        connection = self._connection
        with connection.reactor.mutex:
            connection.privmsg(channel, message)
            # send_raw turns socket errors into a disconnect instead of raising.
            if not connection.is_connected():
                msg = f"connection lost while posting to {channel}"
                raise irc.client.ServerNotConnectedError(msg)

    def mark_joined(self, channel: str) -> None:
        """Record that we joined ``channel``."""
        with self._roster_lock:
            self._roster[channel.lower()] = channel

    def mark_left(self, channel: str) -> None:
        """Record that we are no longer in ``channel``."""
        with self._roster_lock:
            self._roster.pop(channel.lower(), None)

    def has_joined(self, channel: str) -> bool:
        """Return whether ``channel`` is in the roster."""
        with self._roster_lock:
            return channel.lower() in self._roster


class SessionManager:
    """Own the IRC connection and hand its session to the caller once.

    Parameters
    ----------
    settings
        IRC server, identity and channel settings.
    reactor_factory
        Builds the ``irc`` reactor driving the connection; tests substitute
        a scripted fake.

    """

    def __init__(
        self,
        settings: IrcSettings,
        *,
        reactor_factory: cabc.Callable[[], irc.client.Reactor] = irc.client.Reactor,
    ) -> None:
        """Prepare the manager without touching the network."""
        self._settings = settings
        self._channels, self._channel_keys = split_channel_keys(settings.channels)
        self._reactor_factory = reactor_factory
        self._ready: concurrent.futures.Future[IrcSession] = concurrent.futures.Future()
        self._session: IrcSession | None = None
        self._greeted: set[str] = set()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.state = SessionState.BOOTSTRAPPING

    @property
    def channels(self) -> list[str]:
        """Return the configured channel names, without keys."""
        return list(self._channels)

    def start(self) -> None:
        """Start the background thread that connects and runs the loop."""
        if self._thread is not None:
            msg = "IRC session manager already started"
            raise RuntimeError(msg)
        self._thread = threading.Thread(
            target=self._run, name="raccoon-irc", daemon=True
        )
        self._thread.start()

    def wait_ready(self, timeout: float | None = None) -> IrcSession:
        """Block until the server has welcomed the session and return it.

        Parameters
        ----------
        timeout
            Seconds to wait; ``None`` waits indefinitely.

        Raises
        ------
        SessionBootstrapError
            If the connection failed before the welcome, or ``timeout``
            elapsed first.

        """
        try:
            return self._ready.result(timeout=timeout)
        except TimeoutError as exc:
            raise SessionBootstrapError.timed_out(timeout or 0.0) from exc

    def is_ready(self) -> bool:
        """Return whether the session was handed off and is still connected."""
        return (
            self._ready.done()
            and self._ready.exception() is None
            and self._ready.result().is_connected()
        )

    def stop(self, timeout: float | None = None) -> None:
        """Stop the protocol loop, disconnect, and wait for the thread."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def _connect_factory(self) -> irc.connection.Factory:
        if not self._settings.use_tls:
            return irc.connection.Factory()
        context = ssl.create_default_context()
        wrapper = functools.partial(
            context.wrap_socket, server_hostname=self._settings.server
        )
        return irc.connection.Factory(wrapper=wrapper)

    def _register_handlers(self, reactor: irc.client.Reactor) -> None:
        handlers: dict[str, cabc.Callable[..., None]] = {
            "welcome": self._on_welcome,
            "namreply": self._on_namreply,
            "join": self._on_join,
            "part": self._on_part,
            "kick": self._on_kick,
            "error": self._on_error,
            "disconnect": self._on_disconnect,
        }
        for event_type, handler in handlers.items():
            reactor.add_global_handler(event_type, handler)

    def _run(self) -> None:
        settings = self._settings
        reactor = self._reactor_factory()
        self._register_handlers(reactor)

        log_info(
            logger,
            "Connecting to IRC server %s:%d as %s (tls=%s)",
            settings.server,
            settings.port,
            settings.nickname,
            settings.use_tls,
        )
        try:
            connection = reactor.server().connect(
                settings.server,
                settings.port,
                settings.nickname,
                connect_factory=self._connect_factory(),
            )
        except irc.client.ServerConnectionError as exc:
            self._fail(
                SessionBootstrapError.connect_failed(settings.server, settings.port, exc)
            )
            return

        self._session = IrcSession(connection)
        self.state = SessionState.AWAITING_WELCOME
        try:
            while not self._stop.is_set():
                reactor.process_once(timeout=_LOOP_TICK_SECONDS)
        except Exception as exc:  # noqa: BLE001 - the thread must record why it ended
            log_exception(logger, "IRC protocol loop crashed", exc)
            self._fail(SessionBootstrapError.closed_before_welcome(exc))
        finally:
            if connection.is_connected():
                connection.disconnect(_QUIT_MESSAGE)
            if not self._ready.done():
                self._fail(SessionBootstrapError.closed_before_welcome("session stopped"))

    def _fail(self, error: SessionBootstrapError) -> None:
        """Mark the session failed, resolving a pending handoff with ``error``."""
        self.state = SessionState.FAILED
        self._stop.set()
        if not self._ready.done():
            log_error(logger, "IRC session bootstrap failed: %s", error)
            self._ready.set_exception(error)

    def _publish(self) -> None:
        session = typ.cast("IrcSession", self._session)
        self._ready.set_result(session)
        log_info(logger, "IRC session registered as %s", session.nickname)

    def _update_ready_state(self) -> None:
        session = self._session
        if self.state is not SessionState.JOINING or session is None:
            return
        if all(session.has_joined(channel) for channel in self._channels):
            self.state = SessionState.READY
            log_info(logger, "Joined all configured channels: %s", ", ".join(self._channels))

    def _on_welcome(
        self, connection: irc.client.ServerConnection, _event: irc.client.Event
    ) -> None:
        if self._ready.done():
            log_warning(logger, "Ignoring repeated IRC welcome; session already published")
            return
        self.state = SessionState.JOINING
        if self._settings.nick_password:
            connection.privmsg(NICKSERV, f"IDENTIFY {self._settings.nick_password}")
        for channel in self._channels:
            connection.join(channel, key=self._channel_keys.get(channel, ""))
        self._publish()
        self._update_ready_state()

    def _on_namreply(
        self, connection: irc.client.ServerConnection, event: irc.client.Event
    ) -> None:
        # RPL_NAMREPLY arguments: channel type, channel, space-separated nicks
        if len(event.arguments) < 2:  # noqa: PLR2004
            return
        channel = event.arguments[1]
        greeting = self._settings.greeting
        if not greeting or channel.lower() in self._greeted:
            return
        self._greeted.add(channel.lower())
        connection.privmsg(channel, greeting)

    def _is_self(self, connection: irc.client.ServerConnection, nick: str) -> bool:
        return nick.lower() == connection.get_nickname().lower()

    def _on_join(
        self, connection: irc.client.ServerConnection, event: irc.client.Event
    ) -> None:
        if self._session is None or not self._is_self(connection, event.source.nick):
            return
        self._session.mark_joined(event.target)
        log_info(logger, "Joined %s", event.target)
        self._update_ready_state()

    def _on_part(
        self, connection: irc.client.ServerConnection, event: irc.client.Event
    ) -> None:
        if self._session is None or not self._is_self(connection, event.source.nick):
            return
        self._session.mark_left(event.target)
        log_warning(logger, "Left %s", event.target)

    def _on_kick(
        self, connection: irc.client.ServerConnection, event: irc.client.Event
    ) -> None:
        if self._session is None or not event.arguments:
            return
        if not self._is_self(connection, event.arguments[0]):
            return
        self._session.mark_left(event.target)
        log_warning(logger, "Kicked from %s by %s", event.target, event.source.nick)

    def _on_error(
        self, _connection: irc.client.ServerConnection, event: irc.client.Event
    ) -> None:
        log_error(logger, "IRC server error: %s", event.target)

    def _on_disconnect(
        self, _connection: irc.client.ServerConnection, event: irc.client.Event
    ) -> None:
        reason = event.arguments[0] if event.arguments else ""
        if self.state is SessionState.FAILED:
            return
        if self._stop.is_set():
            log_info(logger, "Disconnected from IRC: %s", reason)
            return
        if not self._ready.done():
            self._fail(SessionBootstrapError.closed_before_welcome(reason))
            return
        log_error(logger, "Lost IRC connection: %s", reason)
        self.state = SessionState.FAILED
        self._stop.set()
