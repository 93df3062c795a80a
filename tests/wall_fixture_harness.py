from __future__ import annotations

import asyncio
import random
from typing import Any, Callable, Dict, List, Optional, Sequence

from api.engine.protocol_gateway_v1 import ProtocolGateway
from api.engine.session_registry_v1 import SessionRegistry
from api.engine.wall_target_state_v1 import GameSession, WallTarget


class RecordingConnection:
    def __init__(self, fail: bool = False) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail = fail

    async def send_json(self, data: Any) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def types(self) -> List[str]:
        return [message["type"] for message in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class StallingConnection(RecordingConnection):
    """Accepts sends until ``stall()`` is called, then never completes one."""

    def __init__(self) -> None:
        super().__init__()
        self._stalled = False
        self._never = asyncio.Event()

    def stall(self) -> None:
        self._stalled = True

    async def send_json(self, data: Any) -> None:
        if self._stalled:
            await self._never.wait()
        await super().send_json(data)


class ScriptedRng:
    """Replays fixed ``randrange``/``random`` results and fails when a script runs dry."""

    def __init__(self, randranges: Sequence[int] = (), randoms: Sequence[float] = ()) -> None:
        self._randranges = list(randranges)
        self._randoms = list(randoms)
        self.randrange_calls: List[int] = []

    def randrange(self, stop: int) -> int:
        if not self._randranges:
            raise AssertionError(f"unexpected randrange({stop})")
        value = self._randranges.pop(0)
        if not 0 <= value < stop:
            raise AssertionError(f"scripted {value} outside randrange({stop})")
        self.randrange_calls.append(stop)
        return value

    def random(self) -> float:
        if not self._randoms:
            raise AssertionError("unexpected random()")
        return self._randoms.pop(0)

    def exhausted(self) -> bool:
        return not self._randranges and not self._randoms


def make_gateway(target: WallTarget, rng: Optional[Any] = None, send_timeout: float = 5.0) -> ProtocolGateway:
    return ProtocolGateway(
        session=GameSession(target),
        registry=SessionRegistry(send_timeout=send_timeout),
        rng=rng if rng is not None else random.Random(1234),
    )


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> List[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def fire_all(self) -> None:
        for timer in list(self.pending()):
            timer.cancelled = True
            timer.callback()


class FakeScene:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def apply_wall_hole(self, value: int, shape_index: int) -> None:
        self.calls.append(("hole", value, shape_index))

    def apply_wall_solid(self) -> None:
        self.calls.append(("solid",))


class FakeAudio:
    def __init__(self) -> None:
        self.signals: List[str] = []

    def play(self, signal: str) -> None:
        self.signals.append(signal)


class RecordingSender:
    def __init__(self, accept: bool = True) -> None:
        self.accept = accept
        self.messages: List[Dict[str, Any]] = []

    def __call__(self, message: Dict[str, Any]) -> bool:
        if not self.accept:
            return False
        self.messages.append(message)
        return True
