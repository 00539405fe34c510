"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import os

import pytest

from raccoon.chat.writer import RecordingWriter
from raccoon.config import IrcSettings
from tests.helpers.fake_irc import FakeReactor


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    """Keep ``RACCOON_*`` variables and user config files out of tests."""
    for name in list(os.environ):
        if name.startswith("RACCOON_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg")))


@pytest.fixture
def recording_writer() -> RecordingWriter:
    """Return a writer that keeps notifications in memory."""
    return RecordingWriter()


@pytest.fixture
def irc_settings() -> IrcSettings:
    """Return IRC settings for a plain-text test server."""
    return IrcSettings(
        server="irc.example.org",
        port=6667,
        nickname="raccoon",
        channels=["#dev", "#ops:sekrit"],
        use_tls=False,
    )


@pytest.fixture
def fake_reactor() -> FakeReactor:
    """Return a scripted IRC reactor."""
    return FakeReactor()
