from __future__ import annotations

import pytest

from ashbot.config import RoomConfig
from ashbot.generators import GeneratorPool
from ashbot.jokes import REPO_URL, XMPP_NOT_JABBER
from ashbot.rooms import RoomRegistry
from ashbot.triggers import CATEGORIES, DAD, JABBER, RANDOM, RandomSource, ReplyPolicy, should_fire, strip_directed

from conftest import JOKES, FakeClock, ScriptedRandom, make_config


@pytest.mark.parametrize(
    "body,expected",
    [
        ("ash: repo", "repo"),
        ("ash, words", "words"),
        ("ash words", "words"),
        ("ASH: Dad", "Dad"),
        ("ash", ""),
        ("ash:   tell me a story  ", "tell me a story"),
        ("ashley: hi", None),
        ("hey ash", None),
        ("as", None),
    ],
)
def test_strip_directed(body, expected):
    assert strip_directed(body, "ash") == expected


def test_category_priority_order():
    assert CATEGORIES == (JABBER, DAD, RANDOM)
    assert JABBER.min_interval_seconds == 120 and JABBER.probability == 0.5
    assert DAD.min_interval_seconds == 300 and DAD.probability == 0.5
    assert RANDOM.match == "" and RANDOM.probability == 0.01


def test_should_fire_needs_cooldown_substring_and_dice():
    rng = ScriptedRandom(0.0)
    assert should_fire(JABBER, "i use jabber", last_fired=float("-inf"), now=0.0, rng=rng)
    assert not should_fire(JABBER, "i use xmpp", last_fired=float("-inf"), now=0.0, rng=rng)
    assert not should_fire(JABBER, "i use jabber", last_fired=0.0, now=119.9, rng=rng)
    assert should_fire(JABBER, "i use jabber", last_fired=0.0, now=120.0, rng=rng)
    assert not should_fire(JABBER, "i use jabber", last_fired=0.0, now=500.0, rng=ScriptedRandom(0.5))


def test_dice_not_rolled_when_gated():
    rng = ScriptedRandom(0.0)
    should_fire(JABBER, "nothing here", last_fired=float("-inf"), now=0.0, rng=rng)
    should_fire(RANDOM, "anything", last_fired=0.0, now=1.0, rng=rng)
    assert rng.rolls == 0


def test_chance_compares_against_uniform_draw():
    assert RandomSource(rng=None).choose([]) is None
    assert ScriptedRandom(0.3).chance(0.5)
    assert not ScriptedRandom(0.5).chance(0.5)


@pytest.fixture
def setup():
    registry = RoomRegistry.from_config(make_config(RoomConfig(room="chat@example.org", nick="ash")))
    room = registry.lookup("chat", "example.org")

    def _make(roll: float):
        rng = ScriptedRandom(roll)
        clock = FakeClock()
        pool = GeneratorPool.for_registry(registry, rng)
        return room, pool, clock, ReplyPolicy(rng=rng, jokes=JOKES, clock=clock)

    return _make


@pytest.mark.parametrize(
    "command,expected",
    [
        ("jabber", XMPP_NOT_JABBER),
        ("JABBER ", XMPP_NOT_JABBER),
        ("dad", JOKES[0]),
        ("repo", REPO_URL),
        ("code", REPO_URL),
        ("words", "I know 0 words!"),
    ],
)
def test_directed_commands(setup, command, expected):
    room, pool, _, policy = setup(0.99)
    assert policy.directed_reply(room, command, pool) == expected


def test_directed_falls_through_to_brain(setup):
    room, pool, _, policy = setup(0.99)
    assert policy.directed_reply(room, "what's up", pool) is None
    pool.ingest(0, "up we go")
    assert policy.directed_reply(room, "what's up", pool) == "up we go"


def test_ambient_nothing_fires_on_bad_dice(setup):
    room, pool, _, policy = setup(0.99)
    assert policy.ambient_reply(room, "jabber dad", pool) is None
    assert room.cooldowns == {}


def test_higher_priority_category_wins(setup):
    room, pool, clock, policy = setup(0.0)
    assert policy.ambient_reply(room, "my dad uses Jabber", pool) == XMPP_NOT_JABBER
    assert room.cooldowns == {"jabber": clock.now}


def test_cooldown_blocks_same_category(setup):
    room, pool, clock, policy = setup(0.0)
    first = clock.now
    assert policy.ambient_reply(room, "jabber", pool) == XMPP_NOT_JABBER
    clock.advance(60)
    # jabber is cooling down; only the catch-all chatter can fire now
    assert policy.ambient_reply(room, "jabber", pool) == JOKES[0]
    assert room.last_fired("jabber") == first
    assert room.last_fired("random") == clock.now
    clock.advance(60)
    assert policy.ambient_reply(room, "jabber", pool) == XMPP_NOT_JABBER
    assert room.last_fired("jabber") == clock.now


def test_dad_category_tells_a_joke(setup):
    room, pool, _, policy = setup(0.0)
    assert policy.ambient_reply(room, "my dad is here", pool) == JOKES[0]
    assert set(room.cooldowns) == {"dad"}


def test_chatter_can_use_the_brain(setup):
    room, pool, _, policy = setup(0.0)
    pool.ingest(0, "hello world")
    # 0.005 fires the 1% chatter category, 0.9 loses the joke coin flip
    rolls = iter([0.005, 0.9])
    policy.rng.random = lambda: next(rolls)
    assert policy.ambient_reply(room, "hello", pool) == "hello world"
    assert set(room.cooldowns) == {"random"}


def test_cooldowns_are_per_room():
    registry = RoomRegistry.from_config(
        make_config(RoomConfig(room="a@example.org"), RoomConfig(room="b@example.org"))
    )
    rng = ScriptedRandom(0.0)
    pool = GeneratorPool.for_registry(registry, rng)
    policy = ReplyPolicy(rng=rng, jokes=JOKES, clock=FakeClock())
    a = registry.lookup("a", "example.org")
    b = registry.lookup("b", "example.org")
    assert policy.ambient_reply(a, "jabber", pool) == XMPP_NOT_JABBER
    assert policy.ambient_reply(b, "jabber", pool) == XMPP_NOT_JABBER
