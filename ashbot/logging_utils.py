from __future__ import annotations

import logging


def configure_logging(level: str = "INFO") -> None:
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )
    # slixmpp logs every stanza at DEBUG; keep it out of normal runs.
    if lvl > logging.DEBUG:
        logging.getLogger("slixmpp").setLevel(logging.WARNING)
