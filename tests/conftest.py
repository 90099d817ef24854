from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import pytest

from ashbot.config import BotConfig, RoomConfig
from ashbot.generators import GeneratorPool
from ashbot.rooms import RoomRegistry
from ashbot.router import InboundMessage, MessageRouter
from ashbot.store import MessageLog
from ashbot.triggers import RandomSource, ReplyPolicy


JOKES = ["joke one", "joke two", "joke three"]


class ScriptedRandom(RandomSource):
    """Dice that always land the same way; picks take the first item."""

    def __init__(self, roll: float = 0.0) -> None:
        super().__init__(0)
        self.roll = roll
        self.rolls = 0

    def random(self) -> float:
        self.rolls += 1
        return self.roll

    def choose(self, choices: Sequence):
        if not choices:
            return None
        return choices[0]


@dataclass
class FakeClock:
    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeTransport:
    joined: list[tuple[str, str]] = field(default_factory=list)
    sent: list[tuple[str, str]] = field(default_factory=list)
    fail_sends: bool = False

    def join_room(self, room: str, nick: str) -> None:
        self.joined.append((room, nick))

    def send_group_message(self, room: str, body: str) -> None:
        if self.fail_sends:
            raise ConnectionError("stream closed")
        self.sent.append((room, body))


def make_config(*rooms: RoomConfig, jid: str = "ash@example.org", nick: str | None = None) -> BotConfig:
    return BotConfig(jid=jid, password="secret", nick=nick, rooms=list(rooms))


def room_message(body: str, *, room: str = "chat", domain: str = "example.org", nick: str = "alice") -> InboundMessage:
    return InboundMessage(room_local=room, room_domain=domain, resource=nick, body=body)


@dataclass
class Harness:
    registry: RoomRegistry
    pool: GeneratorPool
    log: MessageLog
    transport: FakeTransport
    rng: ScriptedRandom
    clock: FakeClock
    router: MessageRouter


@pytest.fixture
def make_harness(tmp_path):
    logs: list[MessageLog] = []

    def _make(cfg: BotConfig | None = None, *, roll: float = 0.99) -> Harness:
        cfg = cfg or make_config(RoomConfig(room="chat@example.org", nick="ash"))
        registry = RoomRegistry.from_config(cfg)
        rng = ScriptedRandom(roll)
        clock = FakeClock()
        pool = GeneratorPool.for_registry(registry, rng)
        log = MessageLog(tmp_path / f"ash-{len(logs)}.db")
        logs.append(log)
        transport = FakeTransport()
        policy = ReplyPolicy(rng=rng, jokes=JOKES, clock=clock)
        router = MessageRouter(registry=registry, pool=pool, log=log, policy=policy, transport=transport)
        return Harness(registry, pool, log, transport, rng, clock, router)

    yield _make
    for log in logs:
        log.close()
