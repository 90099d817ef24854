from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path

from ashbot.config import ConfigError


logger = logging.getLogger(__name__)


REPO_URL = "https://github.com/moparisthebest/ash"

XMPP_NOT_JABBER = (
    "I'd just like to interject for a moment. What you're referring to as Jabber, is in fact, XMPP, "
    "or as I've recently taken to calling it, XMPP not Jabber. Jabber is not an internet protocol unto "
    "itself, but rather another proprietary product owned by Cisco. XMPP instead is a fully functioning "
    "free protocol made useful by standardization and extensibility.\n"
)


def _parse_jokes(raw: object, source: str) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise ConfigError(f"Joke file must be a JSON list of strings: {source}")
    return [x for x in raw if x.strip()]


def default_jokes() -> list[str]:
    text = resources.files("ashbot").joinpath("data/dad_jokes.json").read_text(encoding="utf-8")
    return _parse_jokes(json.loads(text), "ashbot/data/dad_jokes.json")


def load_jokes(path: str | Path | None = None) -> list[str]:
    """Load the joke corpus from `path`, or the bundled list when unset/empty."""
    if path is None:
        return default_jokes()
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot load jokes from {path}: {e}") from e
    jokes = _parse_jokes(raw, str(path))
    if not jokes:
        logger.warning("Joke file %s is empty; using bundled jokes", path)
        return default_jokes()
    logger.info("Loaded %d jokes from %s", len(jokes), path)
    return jokes
