from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from api.engine.constants import SEND_TIMEOUT_SEC


logger = logging.getLogger(__name__)


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...


@dataclass
class _Outbox:
    connection: Connection
    queue: asyncio.Queue
    writer: Optional[asyncio.Task] = None


class SessionRegistry:
    """Live connections, keyed by a server-assigned id.

    Holds no game state: a client's carried blocks live on the client.

    Every connection owns an outbound queue drained by its own writer task.
    ``send_to`` and ``broadcast`` only enqueue, so messages reach each
    connection in the order they were queued and a socket that stops reading
    never holds up delivery to the others. A send that fails or exceeds
    ``send_timeout`` drops the connection.
    """

    def __init__(self, send_timeout: float = SEND_TIMEOUT_SEC) -> None:
        self.send_timeout = send_timeout
        self._outboxes: Dict[str, _Outbox] = {}
        self._ids = itertools.count(1)

    @property
    def count(self) -> int:
        return len(self._outboxes)

    def register(self, connection: Connection) -> str:
        connection_id = f"conn-{next(self._ids)}"
        outbox = _Outbox(connection=connection, queue=asyncio.Queue())
        outbox.writer = asyncio.get_running_loop().create_task(self._write(connection_id, outbox))
        self._outboxes[connection_id] = outbox
        logger.info("Client connected. Total clients: %d, id: %s", self.count, connection_id)
        return connection_id

    def unregister(self, connection_id: str) -> bool:
        outbox = self._outboxes.pop(connection_id, None)
        if outbox is None:
            return False
        if outbox.writer is not None and outbox.writer is not asyncio.current_task():
            outbox.writer.cancel()
        while not outbox.queue.empty():
            outbox.queue.get_nowait()
            outbox.queue.task_done()
        logger.info("Client disconnected. Total clients: %d, id: %s", self.count, connection_id)
        return True

    def send_to(self, connection_id: str, message: Dict[str, Any]) -> bool:
        outbox = self._outboxes.get(connection_id)
        if outbox is None:
            logger.warning("Dropping %s for unknown connection %s", message.get("type"), connection_id)
            return False
        outbox.queue.put_nowait(message)
        return True

    def broadcast(self, message: Dict[str, Any]) -> int:
        queued = 0
        for connection_id in list(self._outboxes):
            if self.send_to(connection_id, message):
                queued += 1
        return queued

    async def drain(self, connection_id: Optional[str] = None) -> None:
        """Wait until the queued messages of one connection (or all) are written."""
        if connection_id is None:
            outboxes: List[_Outbox] = list(self._outboxes.values())
        else:
            outbox = self._outboxes.get(connection_id)
            outboxes = [outbox] if outbox is not None else []
        for outbox in outboxes:
            await outbox.queue.join()

    async def _write(self, connection_id: str, outbox: _Outbox) -> None:
        while True:
            message = await outbox.queue.get()
            try:
                await asyncio.wait_for(outbox.connection.send_json(message), self.send_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Send of %s to %s timed out after %.1fs",
                    message.get("type"),
                    connection_id,
                    self.send_timeout,
                )
                self.unregister(connection_id)
                return
            except Exception as exc:
                logger.warning("Send of %s to %s failed: %s", message.get("type"), connection_id, exc)
                self.unregister(connection_id)
                return
            finally:
                outbox.queue.task_done()
