from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import websockets
from websockets.exceptions import WebSocketException

from api.engine.constants import RECONNECT_ATTEMPTS, RECONNECT_DELAY_MAX_SEC, RECONNECT_DELAY_SEC
from client.sync_agent import ClientSyncAgent
from engine.determinism import stable_json_dumps


logger = logging.getLogger(__name__)


def reconnect_delay(failures: int, base: float = RECONNECT_DELAY_SEC, cap: float = RECONNECT_DELAY_MAX_SEC) -> float:
    if failures <= 1:
        return min(base, cap)
    return min(base * (2 ** (failures - 1)), cap)


class WallConnection:
    """WebSocket transport for a :class:`ClientSyncAgent`.

    ``send`` never blocks and refuses messages while disconnected, so
    attempts are fire-and-forget from the agent's point of view.
    """

    def __init__(
        self,
        url: str,
        max_attempts: int = RECONNECT_ATTEMPTS,
        base_delay: float = RECONNECT_DELAY_SEC,
        max_delay: float = RECONNECT_DELAY_MAX_SEC,
    ) -> None:
        self.url = url
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.connected = False
        self._outbound: Optional[asyncio.Queue] = None
        self._stopping = False

    def send(self, message: Dict[str, Any]) -> bool:
        if not self.connected or self._outbound is None:
            return False
        self._outbound.put_nowait(stable_json_dumps(message))
        return True

    def stop(self) -> None:
        self._stopping = True

    async def run(self, agent: ClientSyncAgent) -> None:
        failures = 0
        while not self._stopping:
            try:
                async with websockets.connect(self.url) as ws:
                    failures = 0
                    logger.info("Connected to server %s", self.url)
                    await self._serve(ws, agent)
            except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
                logger.warning("Connection to %s lost: %s", self.url, exc)
            finally:
                self.connected = False
                self._outbound = None

            if self._stopping:
                break
            failures += 1
            if failures > self.max_attempts:
                logger.error("Failed to reconnect after %d attempts", self.max_attempts)
                break
            delay = reconnect_delay(failures, self.base_delay, self.max_delay)
            logger.info("Reconnection attempt %d in %.1fs...", failures, delay)
            await asyncio.sleep(delay)

    async def _serve(self, ws: Any, agent: ClientSyncAgent) -> None:
        self._outbound = asyncio.Queue()
        self.connected = True
        agent.on_connected()
        writer = asyncio.create_task(self._drain(ws, self._outbound))
        try:
            async for raw in ws:
                try:
                    message = json.loads(raw)
                except ValueError:
                    logger.warning("Ignoring non-JSON frame from server")
                    continue
                agent.handle_server_message(message)
                if self._stopping:
                    break
        finally:
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass

    async def _drain(self, ws: Any, queue: asyncio.Queue) -> None:
        try:
            while True:
                frame = await queue.get()
                await ws.send(frame)
        except (OSError, WebSocketException) as exc:
            logger.warning("Writer to %s stopped: %s", self.url, exc)
            self.connected = False
            self._outbound = None
