"""Frame bridge for streaming the activator field to WebSocket clients.

The FrameBridge is a frame consumer for SimulationDriver. It receives a
read-only view of the field after each step (in the simulation thread)
and makes a copy available for the server to stream to connected
renderer clients.

Thread-safety: the simulation loop runs in the main thread while the
server's async event loop runs in another. A threading.Lock protects the
shared latest_frame buffer. Frames are copied on
handoff, so the next step can mutate the live field while a client is
still reading the previous frame.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any

import msgpack
import numpy as np

from turinglab.analysis.field_metrics import field_summary


@dataclass
class Frame:
    """A single snapshot of the activator field ready for streaming."""

    step: int
    field_values: np.ndarray  # (rows, cols) float32
    metrics: dict[str, float] = field(default_factory=dict)
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        if self.timestamp == 0.0:
            self.timestamp = time.time()


def pack_frame(frame: Frame) -> bytes:
    """Serialize a Frame to MessagePack binary format.

    The field is sent as raw float32 bytes with dtype/shape metadata so
    the client can reconstruct a typed array.

    Returns:
        MessagePack-encoded bytes ready for WebSocket send.
    """
    data: dict[str, Any] = {
        "step": frame.step,
        "timestamp": frame.timestamp,
        "field": _pack_array(frame.field_values.astype(np.float32)),
        "metrics": frame.metrics,
    }
    result: bytes = msgpack.packb(data, use_bin_type=True)
    return result


def _pack_array(arr: np.ndarray) -> dict[str, Any]:
    """Pack a numpy array into a dict with shape, dtype, and raw bytes."""
    return {
        "shape": list(arr.shape),
        "dtype": arr.dtype.str,
        "data": arr.tobytes(),
    }


class FrameBridge:
    """Bridge between the simulation loop and the WebSocket server.

    Used directly as the driver's frame consumer: ``bridge(field, step)``
    publishes a copy of the field and returns False once a client has
    asked the run to stop. While paused, the call blocks until resumed
    or stopped; this happens between steps, never inside one.

    Publishing is rate-limited to target_fps. Frames arriving faster are
    dropped rather than waited for, so the simulation is never slowed
    down to the display rate.
    """

    def __init__(self, target_fps: float = 30.0) -> None:
        self._lock = threading.Lock()
        self._latest_frame: Frame | None = None
        self._frame_count: int = 0
        self._target_fps = target_fps
        self._min_interval = 1.0 / target_fps if target_fps > 0 else 0.0
        self._last_publish_time: float = 0.0
        self._running = threading.Event()
        self._running.set()
        self._stop_requested = False

    @property
    def frame_count(self) -> int:
        """Total number of frames published."""
        return self._frame_count

    @property
    def target_fps(self) -> float:
        """Target frames per second for streaming."""
        return self._target_fps

    @property
    def paused(self) -> bool:
        """Whether the simulation is paused."""
        return not self._running.is_set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    def pause(self) -> None:
        self._running.clear()

    def resume(self) -> None:
        self._running.set()

    def request_stop(self) -> None:
        """Ask the simulation to stop after the current step."""
        self._stop_requested = True
        # Release a paused consumer so the loop can exit.
        self._running.set()

    def __call__(self, field_values: np.ndarray, step: int) -> bool:
        """Frame consumer entry point, called by the driver after each step.

        Returns:
            False if a stop was requested, True otherwise.
        """
        if not self._stop_requested:
            self.publish_field(field_values, step)
        self._running.wait()
        return not self._stop_requested

    def publish_field(self, field_values: np.ndarray, step: int) -> bool:
        """Copy a field into a Frame and publish it (subject to rate limiting).

        The copy and its summary metrics are only built for frames that
        pass the rate limit.
        """
        now = time.time()
        if self._rate_limited(now):
            return False
        frame = Frame(
            step=step,
            field_values=np.array(field_values, dtype=np.float32),
            metrics=field_summary(field_values),
        )
        self._store(frame, now)
        return True

    def publish_frame(self, frame: Frame) -> bool:
        """Publish a prebuilt frame.

        Rate-limited to target_fps.

        Args:
            frame: The field snapshot to publish.

        Returns:
            True if accepted, False if rate-limited.
        """
        now = time.time()
        if self._rate_limited(now):
            return False
        self._store(frame, now)
        return True

    def _rate_limited(self, now: float) -> bool:
        return now - self._last_publish_time < self._min_interval

    def _store(self, frame: Frame, now: float) -> None:
        with self._lock:
            self._latest_frame = frame
            self._frame_count += 1
            self._last_publish_time = now

    def get_latest_frame(self) -> Frame | None:
        """Get the most recent frame (called from server async loop).

        Returns:
            The latest Frame, or None if no frame has been published yet.
        """
        with self._lock:
            return self._latest_frame

    def get_latest_packed(self) -> bytes | None:
        """Get the most recent frame as packed MessagePack bytes.

        Returns:
            MessagePack bytes, or None if no frame available.
        """
        frame = self.get_latest_frame()
        if frame is None:
            return None
        return pack_frame(frame)
