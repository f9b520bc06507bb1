import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable

import numpy as np

from config import TICK_INTERVAL_MS
from processing.camera import CameraSource, open_camera
from processing.pipeline import process_frame
from processing.sequencer import tick
from state.session import SessionState

logger = logging.getLogger("uvicorn.error")

FrameSource = Callable[[], Any]
UpdateCallback = Callable[[dict], Awaitable[None]]


class TickScheduler:
    """Drive one session on a fixed sampling interval.

    Detection runs in a worker thread and is awaited, so at most one tick is
    ever in flight. Ticks that come due while detection is still running are
    dropped rather than queued.
    """

    def __init__(
        self,
        detector,
        session: SessionState,
        interval_s: float = TICK_INTERVAL_MS / 1000.0,
        on_update: UpdateCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.detector = detector
        self.session = session
        self.interval_s = interval_s
        self.on_update = on_update
        self.clock = clock
        self.tick_count = 0
        self._in_flight = False

    async def step(self, frame_bgr: np.ndarray) -> dict | None:
        """Run one tick on ``frame_bgr``. Returns None if a tick is already running."""
        if self._in_flight:
            return None
        self._in_flight = True
        try:
            result = await asyncio.to_thread(
                process_frame, frame_bgr, self.detector, self.session, self.clock()
            )
        finally:
            self._in_flight = False

        self.tick_count += 1
        if self.tick_count <= 3 or self.tick_count % 30 == 0:
            logger.info(f"[Scheduler] tick #{self.tick_count} -> step={result['step']}, challenge={self.session.current_index}")

        if self.on_update is not None:
            await self.on_update(result)
        return result

    def idle(self):
        """Advance the session clock on a tick with no frame, so a timeout still fires."""
        if not self._in_flight:
            tick(self.session, None, self.clock())

    async def run(self, frame_source: FrameSource, stop: asyncio.Event | None = None) -> SessionState:
        """Tick until the session is terminal or ``stop`` is set."""
        stop = stop or asyncio.Event()
        next_due = self.clock()

        while not stop.is_set() and not self.session.is_terminal:
            frame = frame_source()
            if inspect.isawaitable(frame):
                frame = await frame
            if frame is not None:
                await self.step(frame)
            else:
                self.idle()

            if self.session.is_terminal:
                break

            next_due += self.interval_s
            now = self.clock()
            if next_due < now:
                # Detection overran: skip the missed ticks
                missed = int((now - next_due) // self.interval_s) + 1
                next_due += missed * self.interval_s

            try:
                await asyncio.wait_for(stop.wait(), timeout=max(0.0, next_due - now))
            except asyncio.TimeoutError:
                pass

        return self.session


async def run_camera_session(
    camera: CameraSource,
    detector,
    session: SessionState,
    interval_s: float = TICK_INTERVAL_MS / 1000.0,
    on_update: UpdateCallback | None = None,
    stop: asyncio.Event | None = None,
) -> SessionState:
    """Run a session against a local camera. The camera is released on every exit path."""
    detector.initialize()
    try:
        with open_camera(camera):
            scheduler = TickScheduler(detector, session, interval_s=interval_s, on_update=on_update)
            return await scheduler.run(camera.read, stop)
    finally:
        detector.close()
