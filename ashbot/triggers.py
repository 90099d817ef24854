"""Reply decisions: directed commands and cooldown-gated ambient triggers.

Every inbound room message goes through `ReplyPolicy.reply`. Messages that
start with the room nick are directed and always answered (if the brain has
something to say). Everything else is checked against `CATEGORIES` in order;
the first category whose cooldown, substring and dice roll all pass fires and
restarts its cooldown for that room.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Mapping, Sequence, TypeVar

from ashbot.jokes import REPO_URL, XMPP_NOT_JABBER

if TYPE_CHECKING:
    from ashbot.generators import GeneratorPool
    from ashbot.rooms import Room


logger = logging.getLogger(__name__)

T = TypeVar("T")

DIRECTED_SEPARATORS = ",: \t"

JABBER_COMMANDS = frozenset({"jabber"})
JOKE_COMMANDS = frozenset({"dad"})
REPO_COMMANDS = frozenset({"repo", "code"})
WORDS_COMMANDS = frozenset({"words"})


class RandomSource:
    """All dice rolls and picks go through here so tests can script them."""

    def __init__(self, seed: int | None = None, *, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def chance(self, pct: float) -> bool:
        return pct > self.random()

    def choose(self, choices: Sequence[T]) -> T | None:
        if not choices:
            return None
        return self._rng.choice(choices)

    def weighted(self, counts: Mapping[T, int]) -> T:
        keys = list(counts)
        return self._rng.choices(keys, weights=[counts[k] for k in keys], k=1)[0]


@dataclass(frozen=True)
class TriggerCategory:
    name: str
    match: str  # lowercase substring; "" matches everything
    min_interval_seconds: float
    probability: float


JABBER = TriggerCategory(name="jabber", match="jabber", min_interval_seconds=120, probability=0.5)
DAD = TriggerCategory(name="dad", match="dad", min_interval_seconds=300, probability=0.5)
RANDOM = TriggerCategory(name="random", match="", min_interval_seconds=300, probability=0.01)

# Priority order.
CATEGORIES: tuple[TriggerCategory, ...] = (JABBER, DAD, RANDOM)


def should_fire(
    category: TriggerCategory,
    body_lower: str,
    *,
    last_fired: float,
    now: float,
    rng: RandomSource,
) -> bool:
    """Cooldown, substring, then dice; the dice are only rolled if the rest pass."""
    if now - last_fired < category.min_interval_seconds:
        return False
    if category.match and category.match not in body_lower:
        return False
    return rng.chance(category.probability)


def strip_directed(body: str, nick: str) -> str | None:
    """Return the body with a leading `nick`, `nick:` or `nick,` removed.

    Returns None when the message isn't addressed to `nick`. The nick is
    compared case-insensitively and must be followed by a separator or the
    end of the message, so `ashley` is not addressed to `ash`.
    """
    if not nick or len(body) < len(nick):
        return None
    if body[: len(nick)].lower() != nick.lower():
        return None
    rest = body[len(nick) :]
    if rest and rest[0] not in DIRECTED_SEPARATORS and not rest[0].isspace():
        return None
    return rest.lstrip(DIRECTED_SEPARATORS).strip()


class ReplyPolicy:
    def __init__(
        self,
        *,
        rng: RandomSource,
        jokes: Sequence[str],
        clock: Callable[[], float] = time.monotonic,
        categories: Sequence[TriggerCategory] = CATEGORIES,
    ) -> None:
        self.rng = rng
        self.jokes = list(jokes)
        self.clock = clock
        self.categories = tuple(categories)

    def joke(self) -> str | None:
        return self.rng.choose(self.jokes)

    def reply(self, room: Room, body: str, pool: GeneratorPool) -> str | None:
        directed = strip_directed(body, room.nick)
        if directed is not None:
            logger.debug("directed body: %s", directed)
            return self.directed_reply(room, directed, pool)
        return self.ambient_reply(room, body, pool)

    def directed_reply(self, room: Room, body: str, pool: GeneratorPool) -> str | None:
        command = body.strip().lower()
        if command in JABBER_COMMANDS:
            return XMPP_NOT_JABBER
        if command in JOKE_COMMANDS:
            return self.joke()
        if command in REPO_COMMANDS:
            return REPO_URL
        if command in WORDS_COMMANDS:
            return f"I know {pool.word_count(room.primary_chain)} words!"
        return pool.generate(room.primary_chain, body)

    def ambient_reply(self, room: Room, body: str, pool: GeneratorPool) -> str | None:
        body_lower = body.lower()
        now = self.clock()
        for category in self.categories:
            if not should_fire(
                category,
                body_lower,
                last_fired=room.last_fired(category.name),
                now=now,
                rng=self.rng,
            ):
                continue
            room.mark_fired(category.name, now)
            logger.info("room %s: %s trigger fired", room.bare, category.name)
            return self._category_reply(category, room, body, pool)
        return None

    def _category_reply(self, category: TriggerCategory, room: Room, body: str, pool: GeneratorPool) -> str | None:
        if category.name == JABBER.name:
            return XMPP_NOT_JABBER
        if category.name == DAD.name:
            return self.joke()
        # Chatter: coin flip between a joke and the brain.
        if self.rng.chance(0.5):
            return self.joke()
        return pool.generate(room.primary_chain, body)
