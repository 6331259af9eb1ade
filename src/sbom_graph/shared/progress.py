"""
Cooperative progress reporting and cancellation for long analysis passes.

The engine never talks to a UI directly. It calls ``Checkpoint.tick`` or
``Checkpoint.step`` while it works; the checkpoint yields the thread, checks
the cancellation token and publishes ``ProgressEvent`` messages onto a bounded
``ProgressChannel``. The same engine code therefore runs unchanged in a test
(``Checkpoint()`` with no channel) or on a worker thread feeding a consumer.
"""

import queue
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from .exceptions import ProcessingAbortedError


@dataclass(frozen=True)
class ProgressEvent:
    percent: int
    message: str


@dataclass(frozen=True)
class CompleteEvent:
    result: Any


@dataclass(frozen=True)
class ErrorEvent:
    message: str


@dataclass(frozen=True)
class AbortedEvent:
    message: str = "Processing aborted"


TerminalEvent = CompleteEvent | ErrorEvent | AbortedEvent
ChannelEvent = ProgressEvent | CompleteEvent | ErrorEvent | AbortedEvent


class CancellationToken:
    """Advisory cancellation flag shared between a caller and a running pass."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ProgressChannel:
    """Bounded, ordered message channel from an analysis pass to its consumer.

    Progress events are best-effort: once ``maxsize`` events are waiting, new
    ones are dropped rather than blocking the producer. The terminal event is
    exempt from the bound, so exactly one is always delivered and nothing is
    accepted after it, whether or not anyone is draining the channel.
    """

    def __init__(self, maxsize: int = 256):
        self.maxsize = max(1, maxsize)
        self._queue: queue.Queue[ChannelEvent] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._last_percent = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, percent: float, message: str) -> bool:
        """Queue a progress update, clamped so percentages never go backwards.

        Returns:
            True if the event was queued
        """
        with self._lock:
            if self._closed:
                return False
            if self._queue.qsize() >= self.maxsize:
                return False
            clamped = max(self._last_percent, min(100, int(percent)))
            self._queue.put_nowait(ProgressEvent(clamped, message))
            self._last_percent = clamped
            return True

    def close(self, event: TerminalEvent) -> None:
        """Deliver the terminal event. Later calls are ignored."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(event)

    def get(self, timeout: float | None = None) -> ChannelEvent:
        return self._queue.get(timeout=timeout)

    def __iter__(self) -> Iterator[ChannelEvent]:
        """Yield events in order up to and including the terminal event."""
        while True:
            event = self._queue.get()
            yield event
            if not isinstance(event, ProgressEvent):
                return


class Checkpoint:
    """Engine-side hook called between units of work."""

    def __init__(
        self,
        channel: ProgressChannel | None = None,
        token: CancellationToken | None = None,
        interval: int = 500,
    ):
        """Initialize the checkpoint.

        Args:
            channel: Where progress events go (None discards them)
            token: Cancellation flag checked at every checkpoint
            interval: Default number of items between checkpoints in ``tick``
        """
        self.channel = channel
        self.token = token
        self.interval = max(1, interval)

    def check_abort(self) -> None:
        if self.token is not None and self.token.cancelled:
            raise ProcessingAbortedError()

    def step(self, percent: float, message: str) -> None:
        """Phase boundary: check for cancellation, report, yield the thread."""
        self.check_abort()
        if self.channel is not None:
            self.channel.publish(percent, message)
        time.sleep(0)

    def tick(
        self,
        done: int,
        total: int,
        span: tuple[float, float],
        message: str,
        interval: int | None = None,
    ) -> None:
        """Per-item hook that only acts every ``interval`` items.

        Args:
            done: Items processed so far
            total: Items in this phase
            span: Percent range (start, end) this phase maps onto
            message: Phase description
            interval: Override for the default interval
        """
        every = interval or self.interval
        if done % every:
            return
        start, end = span
        fraction = done / total if total else 1.0
        self.step(start + (end - start) * fraction, f"{message} ({done}/{total})...")
