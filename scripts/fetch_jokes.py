from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

import requests

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ashbot.logging_utils import configure_logging


logger = logging.getLogger(__name__)

SEARCH_URL = "https://icanhazdadjoke.com/search"


def fetch_page(page: int, *, limit: int, retries: int = 3, timeout_s: float = 30.0) -> list[str]:
    last_err: Exception | None = None
    for attempt in range(1, retries + 1):
        try:
            r = requests.get(
                SEARCH_URL,
                params={"limit": limit, "page": page},
                headers={"Accept": "application/json", "User-Agent": "ash-bot (https://github.com/moparisthebest/ash)"},
                timeout=timeout_s,
            )
            r.raise_for_status()
            results = r.json().get("results", [])
            return [str(it["joke"]) for it in results if it.get("joke")]
        except Exception as e:  # noqa: BLE001
            last_err = e
            logger.warning("Fetching page %d failed (attempt %d/%d): %s", page, attempt, retries, e)
            time.sleep(float(attempt))
    raise last_err or RuntimeError("joke fetch failed")


def main() -> None:
    ap = argparse.ArgumentParser(description="Download dad jokes into a JSON list usable as jokes_json.")
    ap.add_argument("--out", default="dad.json")
    ap.add_argument("--pages", type=int, default=25)
    ap.add_argument("--limit", type=int, default=30)
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    configure_logging(args.log_level)

    jokes: list[str] = []
    for page in range(1, args.pages + 1):
        batch = fetch_page(page, limit=args.limit)
        logger.info("page %d: %d jokes", page, len(batch))
        if not batch:
            break
        jokes.extend(batch)

    # de-dupe, keep first-seen order
    jokes = list(dict.fromkeys(jokes))
    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(jokes, f, ensure_ascii=False, indent=2)
    print(f"wrote {len(jokes)} jokes to {out}")


if __name__ == "__main__":
    main()
