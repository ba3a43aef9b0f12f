# core/animation_scheduler.py

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import SchedulerMisuse

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"


@dataclass
class AnimationCursor:
    current_index: int = 0
    # None until the first tick after (re)start sets the timing baseline
    last_advance_timestamp: Optional[float] = None

    def reset(self):
        self.current_index = 0
        self.last_advance_timestamp = None


class AnimationScheduler:
    """
    Advances a frame cursor at a fixed rate from a repaint-driven tick source.

    The tick source is any object with:
      request_tick(callback) -> handle   call callback(timestamp_ms) once, on the next repaint
      cancel_tick(handle)                drop a pending request
    Timestamps must be monotonic milliseconds.

    The cursor advances by exactly one frame when at least 1000 / fps ms have passed
    since the last advance; slow ticks never make it skip frames to catch up.
    """

    def __init__(self, tick_source, cursor=None):
        self.tick_source = tick_source
        self.cursor = cursor if cursor is not None else AnimationCursor()
        self.state = IDLE
        self.fps = None
        self.frame_count = 0
        self.on_advance = None
        self._pending = None

    @property
    def running(self):
        return self.state == RUNNING

    @property
    def current_index(self):
        return self.cursor.current_index

    @property
    def frame_interval(self):
        return 1000 / self.fps

    def start(self, fps, frame_count, on_advance=None):
        if self.running:
            logger.debug("Scheduler already running, keeping the existing clock")
            return
        self._check_rate(fps)
        if frame_count <= 0:
            raise SchedulerMisuse(f"frame_count must be positive, got {frame_count}")

        if frame_count != self.frame_count:
            self.cursor.reset()
        self.fps = fps
        self.frame_count = frame_count
        self.on_advance = on_advance
        # Restart the timing baseline so the shown frame gets a full interval
        self.cursor.last_advance_timestamp = None
        self.state = RUNNING
        self._request_tick()

    def stop(self):
        if self._pending is not None:
            self.tick_source.cancel_tick(self._pending)
            self._pending = None
        if self.running:
            logger.debug("Scheduler stopped at frame %d", self.cursor.current_index)
        self.state = IDLE

    def set_rate(self, fps):
        """Changes the rate for subsequent ticks without touching the current frame."""
        self._check_rate(fps)
        self.fps = fps

    def reset(self, frame_count=None):
        """Rewinds to frame 0, e.g. after the sheet image or frame count changed."""
        if frame_count is not None:
            if frame_count <= 0:
                raise SchedulerMisuse(f"frame_count must be positive, got {frame_count}")
            self.frame_count = frame_count
        self.cursor.reset()

    def _check_rate(self, fps):
        if fps is None or fps <= 0:
            raise SchedulerMisuse(f"fps must be positive, got {fps}")

    def _request_tick(self):
        self._pending = self.tick_source.request_tick(self._on_tick)

    def _on_tick(self, timestamp):
        self._pending = None
        if not self.running:
            return

        cursor = self.cursor
        try:
            if cursor.last_advance_timestamp is None:
                cursor.last_advance_timestamp = timestamp
            elif timestamp - cursor.last_advance_timestamp >= self.frame_interval:
                cursor.current_index = (cursor.current_index + 1) % self.frame_count
                cursor.last_advance_timestamp = timestamp
                if self.on_advance is not None:
                    self.on_advance(cursor.current_index)
        finally:
            # Keep the clock alive even if on_advance raised; it may also have stopped us
            if self.running and self._pending is None:
                self._request_tick()
