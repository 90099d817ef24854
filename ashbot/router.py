"""Per-event control loop between the XMPP transport and the brains.

Events arrive one at a time on the transport's event loop and are handled to
completion before the next one, so rooms, cooldowns and the generator pool
are only ever touched from here and need no locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from ashbot.generators import GeneratorPool
from ashbot.rooms import RoomRegistry
from ashbot.store import MessageLog, StorageError
from ashbot.triggers import ReplyPolicy


logger = logging.getLogger(__name__)


class ChatTransport(Protocol):
    def join_room(self, room: str, nick: str) -> None: ...

    def send_group_message(self, room: str, body: str) -> None: ...


@dataclass(frozen=True)
class InboundMessage:
    room_local: str | None  # None when the sender is not a room address
    room_domain: str
    resource: str | None
    body: str | None
    is_error: bool = False

    @property
    def sender(self) -> str:
        local = f"{self.room_local}@" if self.room_local else ""
        resource = f"/{self.resource}" if self.resource else ""
        return f"{local}{self.room_domain}{resource}"


class MessageRouter:
    def __init__(
        self,
        *,
        registry: RoomRegistry,
        pool: GeneratorPool,
        log: MessageLog,
        policy: ReplyPolicy,
        transport: ChatTransport,
    ) -> None:
        self.registry = registry
        self.pool = pool
        self.log = log
        self.policy = policy
        self.transport = transport

    def on_session_established(self) -> None:
        # Runs again on every reconnect; joining a room we're already in is harmless.
        for room in self.registry:
            logger.info("Joining %s as %s", room.bare, room.nick)
            self.transport.join_room(room.bare, room.nick)

    def handle_message(self, msg: InboundMessage) -> str | None:
        """Process one inbound message; returns the reply produced for it, if any."""
        if msg.is_error:
            logger.info("ignoring error message from '%s'", msg.sender)
            return None
        if not msg.resource or msg.body is None:
            logger.info("ignoring: message: from '%s', body: %r", msg.sender, msg.body)
            return None
        if not msg.room_local:
            logger.info("ignoring: from: '%s', body: %r", msg.sender, msg.body)
            return None

        room = self.registry.lookup(msg.room_local, msg.room_domain)
        if room is None:
            logger.info("ignoring: from: '%s', body: %r", msg.sender, msg.body)
            return None
        if msg.resource == room.nick:
            return None

        body = msg.body
        logger.info("from: '%s', body: %s", msg.sender, body)

        response = self.policy.reply(room, body, self.pool)
        if response:
            logger.info("reply: %s", response)
            try:
                self.transport.send_group_message(room.bare, response)
            except Exception:  # noqa: BLE001
                logger.exception("Failed to send reply to %s", room.bare)

        try:
            self.log.append(msg.room_local, msg.room_domain, msg.resource, body)
        except StorageError as e:
            logger.warning("Message from %s not logged: %s", msg.sender, e)

        self.pool.ingest_all(room.chain_indices, body)
        return response or None
