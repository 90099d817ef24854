from __future__ import annotations

import asyncio
import logging

import slixmpp
from slixmpp.stanza import Message

from ashbot.generators import GeneratorPool
from ashbot.rooms import RoomRegistry
from ashbot.router import InboundMessage, MessageRouter
from ashbot.store import MessageLog
from ashbot.triggers import ReplyPolicy


logger = logging.getLogger(__name__)


def inbound_from_stanza(msg: Message) -> InboundMessage:
    sender = msg["from"]
    body = msg["body"]
    return InboundMessage(
        room_local=sender.user or None,
        room_domain=sender.domain,
        resource=sender.resource or None,
        # slixmpp hands back "" for a missing <body/>
        body=body if body else None,
        is_error=msg["type"] == "error",
    )


class AshXMPPClient(slixmpp.ClientXMPP):
    def __init__(
        self,
        jid: str,
        password: str,
        *,
        registry: RoomRegistry,
        pool: GeneratorPool,
        log: MessageLog,
        policy: ReplyPolicy,
    ) -> None:
        super().__init__(jid, password)

        self.auth_failed = False
        self._joins: set[asyncio.Task] = set()

        self.register_plugin("xep_0030")  # service discovery
        self.register_plugin("xep_0045")  # multi-user chat
        self.register_plugin("xep_0199", {"keepalive": True})  # ping

        self.router = MessageRouter(
            registry=registry,
            pool=pool,
            log=log,
            policy=policy,
            transport=self,
        )

        self.add_event_handler("session_start", self._on_session_start)
        self.add_event_handler("message", self._on_message)
        self.add_event_handler("failed_all_auth", self._on_failed_auth)
        self.add_event_handler("disconnected", self._on_disconnected)

    # ChatTransport

    def join_room(self, room: str, nick: str) -> None:
        task = self.loop.create_task(self._join(room, nick))
        self._joins.add(task)
        task.add_done_callback(self._joins.discard)

    async def _join(self, room: str, nick: str) -> None:
        try:
            # maxstanzas=0: we keep our own log, no backlog from the room
            await self.plugin["xep_0045"].join_muc_wait(slixmpp.JID(room), nick, maxstanzas=0)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to join %s", room)
            return
        logger.info("Joined %s as %s", room, nick)

    def send_group_message(self, room: str, body: str) -> None:
        self.send_message(mto=slixmpp.JID(room), mbody=body, mtype="groupchat")

    # events

    def _on_session_start(self, event) -> None:
        logger.info("Session established as %s", self.boundjid)
        self.send_presence()
        self.router.on_session_established()

    def _on_message(self, msg: Message) -> None:
        self.router.handle_message(inbound_from_stanza(msg))

    def _on_failed_auth(self, event) -> None:
        logger.error("Authentication failed for %s; giving up", self.boundjid.bare)
        self.auth_failed = True
        self.disconnect()

    def _on_disconnected(self, reason) -> None:
        if self.auth_failed:
            self.loop.stop()
            return
        logger.warning("Disconnected (%s); reconnecting", reason)
        self.connect()
