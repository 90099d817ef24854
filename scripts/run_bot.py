from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Allow running as `python scripts/run_bot.py` without installing the package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def _require_dependencies() -> None:
    try:
        import slixmpp  # noqa: F401
        import yaml  # noqa: F401
    except ModuleNotFoundError as e:
        venv_python = PROJECT_ROOT / ".venv" / "bin" / "python"
        msg = (
            f"Missing dependency: {e.name}.\n\n"
            "You are probably running the bot with a Python interpreter that does not have the project's dependencies installed.\n\n"
            "Fix (recommended):\n"
            f"  {venv_python} -m pip install -e .\n"
            f"  {venv_python} scripts/run_bot.py /path/to/ash.yaml\n"
        )
        raise SystemExit(msg) from e


logger = logging.getLogger("ashbot.run")


def main() -> None:
    ap = argparse.ArgumentParser(description="Markov chain XMPP group chat bot.")
    ap.add_argument(
        "config",
        nargs="?",
        help="Path to ash.yaml (default: ~/.config/ash.yaml, then /etc/ash/ash.yaml)",
    )
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--seed", type=int, default=None, help="Seed the dice (for reproducible runs)")
    args = ap.parse_args()

    _require_dependencies()

    from ashbot.config import ConfigError, find_config, load_config, resolve_password
    from ashbot.generators import GeneratorPool
    from ashbot.jokes import load_jokes
    from ashbot.logging_utils import configure_logging
    from ashbot.replay import replay_history
    from ashbot.rooms import RoomRegistry
    from ashbot.store import MessageLog, StorageError
    from ashbot.triggers import RandomSource, ReplyPolicy
    from ashbot.xmpp_bot import AshXMPPClient

    configure_logging(args.log_level)

    try:
        cfg = load_config(find_config(args.config))
        password = resolve_password(cfg)
        registry = RoomRegistry.from_config(cfg)
        jokes = load_jokes(cfg.jokes_json)
    except ConfigError as e:
        raise SystemExit(f"ash: {e}") from e

    rng = RandomSource(args.seed)
    pool = GeneratorPool.for_registry(registry, rng)
    try:
        log = MessageLog(cfg.db)
        replay_history(log.scan_all(), registry, pool)
    except StorageError as e:
        raise SystemExit(f"ash: {e}") from e

    client = AshXMPPClient(
        cfg.jid,
        password,
        registry=registry,
        pool=pool,
        log=log,
        policy=ReplyPolicy(rng=rng, jokes=jokes),
    )
    client.connect()
    try:
        client.loop.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        log.close()
    if client.auth_failed:
        raise SystemExit("ash: authentication failed, check jid and password")


if __name__ == "__main__":
    main()
