import argparse
import asyncio
import logging
import sys
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


REPO_ROOT = _repo_root()
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from api.engine.runtime_settings_v1 import configure_logging
from client.connection import WallConnection
from client.sync_agent import ClientSyncAgent
from engine.shape_catalog import shape_at


logger = logging.getLogger("headless_client")


class LoggingScene:
    def apply_wall_hole(self, value: int, shape_index: int) -> None:
        logger.info("Wall hole: %d %s", value, list(shape_at(value, shape_index) or ()))

    def apply_wall_solid(self) -> None:
        logger.info("Wall solid")


class LoggingAudio:
    def play(self, signal: str) -> None:
        logger.info("Sound: %s", signal)


async def _run(url: str) -> None:
    connection = WallConnection(url)
    agent = ClientSyncAgent(send=connection.send, scene=LoggingScene(), audio=LoggingAudio())
    await connection.run(agent)


def main() -> int:
    ap = argparse.ArgumentParser(description="Connect to the wall server and log what a client would display")
    ap.add_argument("--url", default="ws://127.0.0.1:3001/ws", help="Wall server WebSocket URL")
    ap.add_argument("--log-level", default="INFO", help="Python logging level")
    args = ap.parse_args()

    configure_logging(args.log_level)
    try:
        asyncio.run(_run(args.url))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
