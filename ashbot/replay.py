from __future__ import annotations

import logging
from typing import Iterable

from ashbot.generators import GeneratorPool
from ashbot.rooms import RoomRegistry
from ashbot.store import PersistedMessage


logger = logging.getLogger(__name__)


def replay_history(
    messages: Iterable[PersistedMessage],
    registry: RoomRegistry,
    pool: GeneratorPool,
) -> int:
    """Feed logged messages back into the brains, in log order.

    Messages from rooms that are no longer configured go to chain 0 so old
    history still counts for something. Returns the number of messages fed.
    """
    total = 0
    orphaned = 0
    for m in messages:
        room = registry.lookup(m.room_local, m.room_domain)
        if room is not None:
            pool.ingest_all(room.chain_indices, m.body)
        else:
            pool.ingest(0, m.body)
            orphaned += 1
        total += 1
    logger.info("Replayed %d logged messages (%d from unknown rooms into chain 0)", total, orphaned)
    return total
