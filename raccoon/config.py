"""Settings for the Raccoon service and their resolution.

Settings are read from, in increasing order of precedence:

1. built-in defaults;
2. a TOML configuration file: the path given explicitly (``--config`` or
   ``RACCOON_CONFIG``), otherwise ``$XDG_CONFIG_HOME/raccoon/raccoon.toml``
   followed by ``./raccoon.toml`` when they exist;
3. ``RACCOON_<SECTION>_<KEY>`` environment variables;
4. command-line overrides.

Usage
-----
Load settings for the running process::

    settings = load_settings()
    settings.service.port  # 7878 unless configured

A configuration file looks like::

    log_level = "INFO"

    [irc]
    server = "irc.libera.chat"
    nickname = "raccoon"
    nick_password = "hunter2"
    channels = ["#project", "#private:key"]

    [gitlab]
    token = "shared-secret"

    [service]
    bind = "127.0.0.1"
    port = 7878

"""

from __future__ import annotations

import collections.abc as cabc
import os
import typing as typ
from pathlib import Path

import msgspec

CONFIG_FILE_NAME: typ.Final = "raccoon.toml"
ENV_PREFIX: typ.Final = "RACCOON_"
CONFIG_PATH_ENV: typ.Final = "RACCOON_CONFIG"

# TCP port number range limits
Port = typ.Annotated[int, msgspec.Meta(ge=1, le=65535)]


class ConfigError(Exception):
    """Raised when the configuration cannot be read or is invalid."""

    @classmethod
    def unreadable(cls, path: Path, reason: object) -> ConfigError:
        """Return an error for a configuration file that failed to load."""
        return cls(f"failed to read config file {path}: {reason}")

    @classmethod
    def invalid(cls, reason: object) -> ConfigError:
        """Return an error for settings that fail validation."""
        return cls(f"invalid configuration: {reason}")


class IrcSettings(msgspec.Struct, frozen=True, kw_only=True):
    """IRC connection settings.

    Attributes
    ----------
    server : str
        IRC server host name.
    port : int
        IRC server port; defaults to the TLS port 6697.
    nickname : str
        Nickname used to register the session.
    nick_password : str | None
        NickServ password; identification is skipped when unset.
    channels : list[str]
        Channels to join, as ``name`` or ``name:key`` entries.
    use_tls : bool
        Whether to wrap the connection in TLS.
    greeting : str | None
        Optional line posted once into each channel after joining it.
    ready_timeout : float | None
        Seconds to wait for the server's welcome at start-up; ``None``
        waits indefinitely.

    """

    server: str
    nickname: str
    port: Port = 6697
    nick_password: str | None = None
    channels: list[str] = msgspec.field(default_factory=list)
    use_tls: bool = True
    greeting: str | None = None
    ready_timeout: float | None = None


class GitLabSettings(msgspec.Struct, frozen=True, kw_only=True):
    """Webhook authentication; with ``token`` unset every webhook is rejected."""

    token: str | None = None


class ServiceSettings(msgspec.Struct, frozen=True, kw_only=True):
    """HTTP listener address."""

    bind: str = "127.0.0.1"
    port: Port = 7878


class RaccoonSettings(msgspec.Struct, frozen=True, kw_only=True):
    """Complete service configuration."""

    irc: IrcSettings
    gitlab: GitLabSettings = msgspec.field(default_factory=GitLabSettings)
    service: ServiceSettings = msgspec.field(default_factory=ServiceSettings)
    log_level: str = "INFO"


_SECTIONS: typ.Final[dict[str, type[msgspec.Struct]]] = {
    "irc": IrcSettings,
    "gitlab": GitLabSettings,
    "service": ServiceSettings,
}
_LIST_KEYS: typ.Final = frozenset({("irc", "channels")})


def default_config_paths(environ: cabc.Mapping[str, str]) -> list[Path]:
    """Return the configuration files consulted when no path is given."""
    xdg_home = environ.get("XDG_CONFIG_HOME", "").strip()
    config_home = Path(xdg_home) if xdg_home else Path.home() / ".config"
    return [config_home / "raccoon" / CONFIG_FILE_NAME, Path(CONFIG_FILE_NAME)]


def _read_toml(path: Path) -> dict[str, typ.Any]:
    try:
        loaded = msgspec.toml.decode(path.read_bytes())
    except (OSError, msgspec.DecodeError) as exc:
        raise ConfigError.unreadable(path, exc) from exc
    if not isinstance(loaded, dict):
        raise ConfigError.unreadable(path, "top level must be a table")
    return loaded


def _merge(base: dict[str, typ.Any], overlay: cabc.Mapping[str, typ.Any]) -> None:
    """Merge ``overlay`` into ``base`` in place, recursing into tables."""
    for key, value in overlay.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, cabc.Mapping):
            _merge(current, value)
        elif isinstance(value, cabc.Mapping):
            base[key] = dict(value)
        else:
            base[key] = value


def _environment_overlay(environ: cabc.Mapping[str, str]) -> dict[str, typ.Any]:
    """Collect ``RACCOON_<SECTION>_<KEY>`` variables into nested settings."""
    overlay: dict[str, typ.Any] = {}
    level = environ.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip()
    if level:
        overlay["log_level"] = level

    for section, struct in _SECTIONS.items():
        for field in struct.__struct_fields__:
            raw = environ.get(f"{ENV_PREFIX}{section.upper()}_{field.upper()}")
            if raw is None:
                continue
            value: typ.Any = raw
            if (section, field) in _LIST_KEYS:
                value = [item.strip() for item in raw.split(",") if item.strip()]
            overlay.setdefault(section, {})[field] = value
    return overlay


def load_settings(
    config_path: Path | None = None,
    *,
    environ: cabc.Mapping[str, str] | None = None,
    overrides: cabc.Mapping[str, typ.Any] | None = None,
) -> RaccoonSettings:
    """Resolve the service settings from files, environment and overrides.

    Parameters
    ----------
    config_path : Path | None, optional
        Explicit configuration file. It must exist. When omitted,
        ``RACCOON_CONFIG`` is consulted, then the default locations.
    environ : Mapping[str, str] | None, optional
        Environment to read; defaults to ``os.environ``.
    overrides : Mapping[str, Any] | None, optional
        Nested values (e.g. ``{"service": {"port": 8080}}``) that take
        precedence over every other source. ``None`` values are ignored.

    Returns
    -------
    RaccoonSettings
        Validated settings.

    Raises
    ------
    ConfigError
        If a configuration file cannot be parsed or the merged settings fail
        validation.

    """
    env = os.environ if environ is None else environ
    merged: dict[str, typ.Any] = {}

    if config_path is None and env.get(CONFIG_PATH_ENV, "").strip():
        config_path = Path(env[CONFIG_PATH_ENV].strip())

    if config_path is not None:
        _merge(merged, _read_toml(config_path))
    else:
        for candidate in default_config_paths(env):
            if candidate.is_file():
                _merge(merged, _read_toml(candidate))

    _merge(merged, _environment_overlay(env))
    if overrides:
        _merge(merged, _drop_none(overrides))

    try:
        return msgspec.convert(merged, type=RaccoonSettings, strict=False)
    except msgspec.ValidationError as exc:
        raise ConfigError.invalid(exc) from exc


def _drop_none(values: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    cleaned: dict[str, typ.Any] = {}
    for key, value in values.items():
        if isinstance(value, dict):
            nested = _drop_none(value)
            if nested:
                cleaned[key] = nested
        elif value is not None:
            cleaned[key] = value
    return cleaned


def settings_environment(settings: RaccoonSettings) -> dict[str, str]:
    """Flatten ``settings`` into ``RACCOON_*`` variables.

    The CLI uses this to hand resolved settings to the Granian worker, which
    rebuilds them with :func:`load_settings`.
    """
    env: dict[str, str] = {f"{ENV_PREFIX}LOG_LEVEL": settings.log_level}
    for section in _SECTIONS:
        values = msgspec.to_builtins(getattr(settings, section))
        for field, value in values.items():
            if value is None:
                continue
            key = f"{ENV_PREFIX}{section.upper()}_{field.upper()}"
            if isinstance(value, list):
                env[key] = ",".join(value)
            elif isinstance(value, bool):
                env[key] = "true" if value else "false"
            else:
                env[key] = str(value)
    return env


__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "GitLabSettings",
    "IrcSettings",
    "RaccoonSettings",
    "ServiceSettings",
    "default_config_paths",
    "load_settings",
    "settings_environment",
]
