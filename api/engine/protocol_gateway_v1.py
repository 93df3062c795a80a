from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from api.engine.match_evaluator_v1 import explain
from api.engine.session_registry_v1 import Connection, SessionRegistry
from api.engine.target_selector_v1 import RandomSource, advance_target
from api.engine.wall_protocol_v1 import (
    AttemptWallMatch,
    ClientMessage,
    MalformedMessage,
    RequestWallTarget,
    UnknownMessage,
    decode_client_message,
    play_match_failure_message,
    update_carry_state_message,
    update_wall_target_message,
    wall_success_celebration_message,
)
from api.engine.wall_target_state_v1 import GameSession


logger = logging.getLogger(__name__)


class Audience(str, Enum):
    ORIGIN = "ORIGIN"
    ALL = "ALL"


@dataclass(frozen=True)
class Outbound:
    audience: Audience
    message: Dict[str, Any]


class ProtocolGateway:
    """Routes client messages to the wall rules and fans replies out.

    ``decide`` reads and replaces the wall target without yielding to the event
    loop, so two handlers never interleave inside it. ``deliver`` queues the
    replies in the same synchronous step, so every client receives them in the
    order they were decided. Handlers then wait only for the sender's own
    queue; a slow peer never holds up anyone else.
    """

    def __init__(self, session: GameSession, registry: SessionRegistry, rng: RandomSource) -> None:
        self.session = session
        self.registry = registry
        self.rng = rng

    async def connect(self, connection: Connection) -> str:
        connection_id = self.registry.register(connection)
        outbound = [Outbound(Audience.ORIGIN, update_wall_target_message(self.session.target))]
        logger.info("Sending current wall target %s to new client %s", self.session.target.describe(), connection_id)
        self.deliver(connection_id, outbound)
        await self.registry.drain(connection_id)
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        self.registry.unregister(connection_id)

    async def handle(self, connection_id: str, message_type: str, payload: Optional[Dict[str, Any]]) -> List[Outbound]:
        logger.info("Received message from client %s: %s", connection_id, message_type)
        outbound = self.decide(connection_id, decode_client_message(message_type, payload))
        self.deliver(connection_id, outbound)
        await self.registry.drain(connection_id)
        return outbound

    def decide(self, connection_id: str, message: ClientMessage) -> List[Outbound]:
        if isinstance(message, RequestWallTarget):
            logger.info("Re-sending current wall target %s to client %s", self.session.target.describe(), connection_id)
            return [Outbound(Audience.ORIGIN, update_wall_target_message(self.session.target))]

        if isinstance(message, AttemptWallMatch):
            return self._decide_attempt(connection_id, message)

        if isinstance(message, MalformedMessage):
            logger.warning(
                "Invalid %s from client %s: %s",
                message.message_type,
                connection_id,
                message.reason,
            )
            return []

        if isinstance(message, UnknownMessage):
            logger.info("Unknown message type from client %s: %s", connection_id, message.message_type)
            return []

        raise TypeError(f"unhandled client message {message!r}")

    def _decide_attempt(self, connection_id: str, message: AttemptWallMatch) -> List[Outbound]:
        target = self.session.target
        verdict = explain(message.attempt, target)
        logger.info(
            "Client %s matched carried %d (shape %d) against target %s: %s/%s",
            connection_id,
            message.attempt.carried_value,
            message.attempt.carried_shape_index,
            target.describe(),
            verdict.result.value,
            verdict.reason.value,
        )

        if not verdict.success:
            return [Outbound(Audience.ORIGIN, play_match_failure_message(message.attempt_id))]

        new_target = advance_target(self.session, self.rng)
        return [
            Outbound(Audience.ORIGIN, update_carry_state_message(message.attempt_id)),
            Outbound(Audience.ALL, wall_success_celebration_message()),
            Outbound(Audience.ALL, update_wall_target_message(new_target)),
        ]

    def deliver(self, connection_id: str, outbound: List[Outbound]) -> None:
        for item in outbound:
            if item.audience is Audience.ORIGIN:
                self.registry.send_to(connection_id, item.message)
            else:
                self.registry.broadcast(item.message)
