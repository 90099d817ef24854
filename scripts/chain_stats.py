from __future__ import annotations

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ashbot.config import find_config, load_config
from ashbot.generators import GeneratorPool
from ashbot.logging_utils import configure_logging
from ashbot.replay import replay_history
from ashbot.rooms import RoomRegistry
from ashbot.store import MessageLog
from ashbot.triggers import RandomSource


def main() -> None:
    p = argparse.ArgumentParser(description="Replay the message log and report what each chain knows (no XMPP connection).")
    p.add_argument("config", nargs="?")
    p.add_argument("--seed-text", default="", help="Also generate one line per chain from this seed")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", default="WARNING")
    args = p.parse_args()

    configure_logging(args.log_level)
    cfg = load_config(find_config(args.config))
    registry = RoomRegistry.from_config(cfg)
    pool = GeneratorPool.for_registry(registry, RandomSource(args.seed))

    log = MessageLog(cfg.db)
    try:
        logged = log.count()
        n = replay_history(log.scan_all(), registry, pool)
    finally:
        log.close()

    print(f"logged={logged} replayed={n} chains={len(pool)}")
    for room in registry:
        print(f"{room.bare:<40} nick={room.nick:<12} chains={room.chain_indices}")
    for i in range(len(pool)):
        line = f"chain {i:>3}: {pool.word_count(i):>7} words"
        if args.seed_text:
            line += f"  | {pool.generate(i, args.seed_text) or '-'}"
        print(line)


if __name__ == "__main__":
    main()
