"""Unit tests for notification writers."""

from __future__ import annotations

import threading
import time

import irc.client
import pytest

from raccoon.chat.errors import OutboundDeliveryError
from raccoon.chat.session import IrcSession
from raccoon.chat.writer import IrcWriter, NotificationWriter, RecordingWriter


class _FakeSession:
    """Session double recording sends and failing on chosen channels."""

    def __init__(self, channels: list[str], failing: dict[str, Exception] | None = None) -> None:
        self._channels = channels
        self._failing = failing or {}
        self.sent: list[tuple[str, str]] = []
        self._in_flight = 0
        self.max_in_flight = 0
        self._guard = threading.Lock()

    def channels(self) -> list[str]:
        return list(self._channels)

    def send(self, channel: str, message: str) -> None:
        with self._guard:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            time.sleep(0.001)
            if channel in self._failing:
                raise self._failing[channel]
            self.sent.append((channel, message))
        finally:
            with self._guard:
                self._in_flight -= 1


def _writer(session: _FakeSession) -> IrcWriter:
    return IrcWriter(session)  # type: ignore[arg-type]


class TestIrcWriter:
    """Tests for fan-out delivery to joined channels."""

    def test_fans_out_to_every_channel(self) -> None:
        """Each joined channel receives the notification."""
        session = _FakeSession(["#dev", "#ops"])

        delivered = _writer(session).write("🌋 Ada pushed 1 commits to widgets")

        assert delivered == 2, "expected both channels to be counted"
        assert session.sent == [
            ("#dev", "🌋 Ada pushed 1 commits to widgets"),
            ("#ops", "🌋 Ada pushed 1 commits to widgets"),
        ], "expected one message per channel"

    def test_multi_line_messages_are_split(self) -> None:
        """Each non-blank line is sent as its own message."""
        session = _FakeSession(["#dev"])

        _writer(session).write("first\n\nsecond\n")

        assert session.sent == [("#dev", "first"), ("#dev", "second")], (
            "expected blank lines to be skipped"
        )

    def test_empty_roster_drops_message(self) -> None:
        """Without joined channels the message is dropped and nothing is counted."""
        session = _FakeSession([])

        delivered = _writer(session).write("nobody hears this")

        assert delivered == 0, "expected no channels"
        assert session.sent == [], "nothing should be sent"

    def test_failure_is_best_effort(self) -> None:
        """A failing channel does not stop delivery to the others."""
        session = _FakeSession(
            ["#dev", "#ops", "#qa"],
            failing={
                "#dev": irc.client.ServerNotConnectedError("Not connected."),
                "#qa": irc.client.MessageTooLong("Messages limited to 512 bytes"),
            },
        )

        with pytest.raises(OutboundDeliveryError) as exc_info:
            _writer(session).write("hello")

        assert session.sent == [("#ops", "hello")], "remaining channel should receive"
        assert exc_info.value.channel == "#dev", "first failure should be raised"
        assert isinstance(exc_info.value.cause, irc.client.ServerNotConnectedError), (
            "cause should be preserved"
        )

    def test_lock_released_after_failure(self) -> None:
        """A failed write does not block later writes."""
        session = _FakeSession(["#dev"], failing={"#dev": OSError("gone")})
        writer = _writer(session)

        with pytest.raises(OutboundDeliveryError):
            writer.write("one")
        session._failing.clear()
        writer.write("two")

        assert session.sent == [("#dev", "two")], "second write should be delivered"

    def test_writes_are_serialised(self) -> None:
        """Concurrent writers never have two sends in flight."""
        session = _FakeSession(["#dev", "#ops"])
        writer = _writer(session)
        threads = [
            threading.Thread(target=writer.write, args=(f"message {index}",))
            for index in range(8)
        ]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert session.max_in_flight == 1, "sends overlapped"
        assert len(session.sent) == 16, "every message should reach both channels"
        for index in range(0, 16, 2):
            assert session.sent[index][1] == session.sent[index + 1][1], (
                "a message's channel sends should not interleave with another"
            )


class _ScriptedSocket:
    """Socket stand-in that accepts writes until told to break."""

    def __init__(self) -> None:
        self.written: list[bytes] = []
        self.broken = False
        self.closed = False

    def send(self, data: bytes) -> int:
        if self.broken:
            raise BrokenPipeError(32, "Broken pipe")
        self.written.append(data)
        return len(data)

    def shutdown(self, _how: int) -> None:
        pass

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def live_session() -> tuple[IrcSession, _ScriptedSocket]:
    """Return a session over a real ``irc`` connection joined to ``#dev``."""
    sock = _ScriptedSocket()
    reactor = irc.client.Reactor()
    connection = reactor.server().connect(
        "irc.example.org", 6667, "raccoon", connect_factory=lambda _address: sock
    )
    session = IrcSession(connection)
    session.mark_joined("#dev")
    return session, sock


class TestIrcWriterOverConnection:
    """Tests driving the writer through a real ``irc`` server connection."""

    def test_posts_privmsg(
        self, live_session: tuple[IrcSession, _ScriptedSocket]
    ) -> None:
        """A healthy socket receives the PRIVMSG line."""
        session, sock = live_session

        delivered = IrcWriter(session).write("hello")

        assert delivered == 1, "expected one channel"
        assert sock.written[-1] == b"PRIVMSG #dev :hello\r\n", "unexpected wire line"

    def test_broken_socket_is_a_delivery_failure(
        self, live_session: tuple[IrcSession, _ScriptedSocket]
    ) -> None:
        """A socket error the library turns into a disconnect still fails the write."""
        session, sock = live_session
        sock.broken = True

        with pytest.raises(OutboundDeliveryError) as exc_info:
            IrcWriter(session).write("hello")

        assert exc_info.value.channel == "#dev", "expected the failing channel"
        assert isinstance(exc_info.value.cause, irc.client.ServerNotConnectedError), (
            "expected a lost-connection cause"
        )
        assert not session.is_connected(), "connection should be closed"
        assert sock.closed, "socket should be closed"

    def test_send_waits_for_protocol_loop(
        self, live_session: tuple[IrcSession, _ScriptedSocket]
    ) -> None:
        """Writes wait while the protocol loop holds the reactor mutex."""
        session, sock = live_session
        reactor = session._connection.reactor  # noqa: SLF001
        before = len(sock.written)
        writer = threading.Thread(target=IrcWriter(session).write, args=("hello",))

        with reactor.mutex:
            writer.start()
            writer.join(0.2)
            assert writer.is_alive(), "write should wait for the mutex"
            assert len(sock.written) == before, "nothing should be sent yet"
        writer.join(2.0)

        assert not writer.is_alive(), "write should finish once released"
        assert sock.written[before:] == [b"PRIVMSG #dev :hello\r\n"], (
            "expected the queued message"
        )


class TestRecordingWriter:
    """Tests for the in-memory writer used by the HTTP tests."""

    def test_records_messages(self) -> None:
        """Messages are kept in order."""
        writer = RecordingWriter()
        writer.write("one")
        writer.write("two")

        assert writer.messages == ["one", "two"], "expected messages in order"
        assert writer.contains("tw"), "expected fragment lookup"
        assert not writer.contains("three"), "unexpected fragment match"

    def test_satisfies_protocol(self) -> None:
        """Both writers implement NotificationWriter."""
        assert isinstance(RecordingWriter(), NotificationWriter), "protocol mismatch"
        assert isinstance(_writer(_FakeSession([])), NotificationWriter), (
            "protocol mismatch"
        )
