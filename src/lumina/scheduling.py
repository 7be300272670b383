"""Per-frame callback scheduling for the analysis loop."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, Protocol


class FrameScheduler(Protocol):
    """Run a callback before the next display refresh."""

    def request(self, callback: Callable[[], None]) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class AsyncioFrameScheduler:
    """Fires callbacks on the event loop at a fixed display rate."""

    def __init__(self, fps: float = 30.0, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.interval = 1.0 / fps
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(self.interval, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()
