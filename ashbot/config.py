from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG_NAME = "ash.yaml"
SYSTEM_CONFIG_PATH = Path("/etc/ash") / DEFAULT_CONFIG_NAME


class ConfigError(ValueError):
    """Bad or missing configuration; fatal at startup."""


@dataclass(frozen=True)
class RoomConfig:
    room: str
    nick: str | None = None
    chain_indices: list[int] | None = None


@dataclass(frozen=True)
class BotConfig:
    jid: str
    password: str = ""
    password_env: str = "ASH_PASSWORD"
    db: Path = Path("ash.db")
    nick: str | None = None
    jokes_json: Path | None = None
    rooms: list[RoomConfig] = field(default_factory=list)


def _require(d: dict[str, Any], key: str) -> Any:
    if key not in d or d[key] in (None, ""):
        raise ConfigError(f"Missing config key: {key}")
    return d[key]


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _parse_chain_indices(raw: Any, room: str) -> list[int] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ConfigError(f"rooms[{room}].chain_indices must be a list")
    out: list[int] = []
    for v in raw:
        # bool is an int subclass; `true` in yaml is not an index
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            raise ConfigError(f"rooms[{room}].chain_indices must hold non-negative integers, got {v!r}")
        out.append(v)
    return out


def _parse_room(raw: Any) -> RoomConfig:
    if isinstance(raw, str):
        return RoomConfig(room=raw)
    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid room entry: {raw!r}")
    room = str(_require(raw, "room")).strip()
    return RoomConfig(
        room=room,
        nick=_optional_str(raw.get("nick")),
        chain_indices=_parse_chain_indices(raw.get("chain_indices"), room),
    )


def parse_config(raw: Any) -> BotConfig:
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")

    rooms_raw = raw.get("rooms") or []
    if not isinstance(rooms_raw, list):
        raise ConfigError("rooms must be a list")

    jokes_json = _optional_str(raw.get("jokes_json"))
    return BotConfig(
        jid=str(_require(raw, "jid")).strip(),
        password=str(raw.get("password", "") or ""),
        password_env=str(raw.get("password_env", "ASH_PASSWORD") or "ASH_PASSWORD"),
        db=Path(str(raw.get("db") or "ash.db")),
        nick=_optional_str(raw.get("nick")),
        jokes_json=Path(jokes_json) if jokes_json else None,
        rooms=[_parse_room(r) for r in rooms_raw],
    )


def load_config(path: str | Path) -> BotConfig:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse config {path}: {e}") from e
    return parse_config(raw)


def _user_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def find_config(explicit: str | Path | None = None) -> Path:
    """Return the config file to load.

    An explicit path must exist. Without one, the user config dir is tried
    before the system-wide file.
    """
    if explicit is not None:
        p = Path(explicit)
        if not p.is_file():
            raise ConfigError(f"provided config cannot be found: {p}")
        return p

    candidates = [_user_config_dir() / DEFAULT_CONFIG_NAME, SYSTEM_CONFIG_PATH]
    for p in candidates:
        if p.is_file():
            return p
    raise ConfigError("valid config file not found (tried: " + ", ".join(str(c) for c in candidates) + ")")


def resolve_password(cfg: BotConfig) -> str:
    if cfg.password:
        return cfg.password
    env_key = cfg.password_env or "ASH_PASSWORD"
    password = os.environ.get(env_key, "")
    if not password:
        raise ConfigError(f"XMPP password missing: set password or env var {env_key}")
    return password
