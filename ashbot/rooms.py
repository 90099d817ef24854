from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from slixmpp import JID
from slixmpp.jid import InvalidJID

from ashbot.config import BotConfig, ConfigError


logger = logging.getLogger(__name__)


DEFAULT_NICK = "ash"
NEVER = float("-inf")


@dataclass
class Room:
    jid: JID  # room@service/nick
    nick: str
    chain_indices: list[int]
    cooldowns: dict[str, float] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.jid.user, self.jid.domain)

    @property
    def bare(self) -> str:
        return self.jid.bare

    @property
    def primary_chain(self) -> int:
        return self.chain_indices[0]

    def last_fired(self, category: str) -> float:
        return self.cooldowns.get(category, NEVER)

    def mark_fired(self, category: str, now: float) -> None:
        self.cooldowns[category] = now


def _dedupe(indices: list[int]) -> list[int]:
    return list(dict.fromkeys(indices))


def _parse_jid(raw: str, what: str) -> JID:
    try:
        return JID(raw)
    except InvalidJID as e:
        raise ConfigError(f"Invalid {what} address {raw!r}: {e}") from e


def _room_occupant_jid(room: JID, nick: str) -> JID:
    """room@service/nick, with the nick normalised the way the server will see it."""
    try:
        return JID(f"{room.bare}/{nick}")
    except InvalidJID as e:
        raise ConfigError(f"Invalid nick {nick!r} for room {room.bare}: {e}") from e


def resolve_nick(room_nick: str | None, bot_nick: str | None, account: JID) -> str:
    return room_nick or bot_nick or account.user or DEFAULT_NICK


class RoomRegistry:
    def __init__(self, rooms: list[Room]) -> None:
        self._rooms: dict[tuple[str, str], Room] = {}
        for room in rooms:
            if room.key in self._rooms:
                logger.warning("Room %s configured twice; keeping the last entry", room.bare)
            self._rooms[room.key] = room

    @classmethod
    def from_config(cls, cfg: BotConfig) -> "RoomRegistry":
        if not cfg.rooms:
            raise ConfigError("no rooms specified!")

        account = _parse_jid(cfg.jid, "account")
        rooms: list[Room] = []
        for rc in cfg.rooms:
            nick = resolve_nick(rc.nick, cfg.nick, account)
            room_jid = _parse_jid(rc.room, "room")
            if not room_jid.user:
                raise ConfigError(f"room jids must have local part: {rc.room!r}")
            chain_indices = _dedupe(list(rc.chain_indices) if rc.chain_indices else [0])
            # everything also feeds the shared chain 0
            if 0 not in chain_indices:
                chain_indices.append(0)
            full = _room_occupant_jid(room_jid, nick)
            # compare against the prepped resource; echoes come back with it
            nick = full.resource
            rooms.append(Room(jid=full, nick=nick, chain_indices=chain_indices))
            logger.info("Room %s as %s, chains %s", full.bare, nick, chain_indices)
        return cls(rooms)

    def lookup(self, local: str, domain: str) -> Room | None:
        return self._rooms.get((local, domain))

    @property
    def max_chain_index(self) -> int:
        return max((max(r.chain_indices) for r in self._rooms.values()), default=0)

    def __iter__(self) -> Iterator[Room]:
        return iter(self._rooms.values())

    def __len__(self) -> int:
        return len(self._rooms)
