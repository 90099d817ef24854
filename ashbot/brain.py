"""Word-level Markov chain used to babble back at the rooms.

Each `Brain` keeps two transition tables built from whitespace tokens: one
forward (word -> next words) and one backward (word -> previous words). A
reply grows outward from a pivot word taken from the seed text, so answers
tend to contain something the other person just said.
"""

from __future__ import annotations

from collections import Counter, defaultdict

from ashbot.triggers import RandomSource


# Sentence boundary marker; never a real token since tokens come from str.split().
BOUNDARY = ""


class Brain:
    def __init__(self, rng: RandomSource, *, max_words: int = 30) -> None:
        self.rng = rng
        self.max_words = max_words
        self._forward: dict[str, Counter[str]] = defaultdict(Counter)
        self._backward: dict[str, Counter[str]] = defaultdict(Counter)
        self._vocabulary: set[str] = set()

    def ingest(self, text: str) -> None:
        tokens = (text or "").split()
        if not tokens:
            return
        self._vocabulary.update(tokens)
        chain = [BOUNDARY, *tokens, BOUNDARY]
        for prev, nxt in zip(chain, chain[1:]):
            self._forward[prev][nxt] += 1
            self._backward[nxt][prev] += 1

    def word_count(self) -> int:
        return len(self._vocabulary)

    def _walk(self, start: str, table: dict[str, Counter[str]]) -> list[str]:
        out: list[str] = []
        word = start
        while len(out) < self.max_words:
            followers = table.get(word)
            if not followers:
                break
            word = self.rng.weighted(followers)
            if word == BOUNDARY:
                break
            out.append(word)
        return out

    def generate(self, seed: str = "") -> str | None:
        if not self._vocabulary:
            return None
        known = [w for w in dict.fromkeys((seed or "").split()) if w in self._vocabulary]
        pivot = self.rng.choose(known)
        if pivot is None:
            words = self._walk(BOUNDARY, self._forward)
        else:
            before = self._walk(pivot, self._backward)
            before.reverse()
            words = before + [pivot] + self._walk(pivot, self._forward)
        if not words:
            return None
        return " ".join(words)
