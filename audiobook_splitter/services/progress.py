"""Progress reporting and cancellation shared by the worker threads.

Workers never wait on the consumer: the channel is an unbounded queue and a
disconnected consumer only produces a logged warning.
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import Iterator, Optional

from .errors import ChannelSendError

logger = logging.getLogger(__name__)

_END_OF_STREAM = object()


class ProgressChannel:
    """Multi-producer, single-consumer message channel."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._connected = threading.Event()
        self._connected.set()

    def send(self, message: str) -> None:
        if not self._connected.is_set():
            raise ChannelSendError("Progress consumer disconnected")
        self._queue.put(message)

    def close(self) -> None:
        """Signal end of stream to the consumer."""
        self._queue.put(_END_OF_STREAM)

    def disconnect(self) -> None:
        """Called by the consumer when it stops listening."""
        self._connected.clear()

    def receive(self, timeout: Optional[float] = None) -> Optional[str]:
        """Return the next message, or ``None`` at end of stream.

        Raises ``queue.Empty`` if ``timeout`` expires first.
        """
        item = self._queue.get(timeout=timeout)
        if item is _END_OF_STREAM:
            return None
        return item

    def __iter__(self) -> Iterator[str]:
        while True:
            message = self.receive()
            if message is None:
                return
            yield message


class ProgressState:
    """Counter of completed intervals, safe to advance from many threads."""

    def __init__(self) -> None:
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def completed(self) -> int:
        return self._completed

    def advance(self, delta: int) -> int:
        with self._lock:
            self._completed += delta
            return self._completed


class RunContext:
    """State handed to every worker of one segmentation run."""

    def __init__(self, channel: Optional[ProgressChannel] = None) -> None:
        self.channel = channel if channel is not None else ProgressChannel()
        self.progress = ProgressState()
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Ask workers to stop before starting their next chunk."""
        if not self._cancelled.is_set():
            logger.info("Cancellation requested")
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class ProgressReporter:
    def __init__(self, state: ProgressState, total: int, channel: ProgressChannel) -> None:
        self.state = state
        self.total = total
        self.channel = channel

    @staticmethod
    def format_message(completed: int, total: int) -> str:
        return f"{completed}/{total} completed!\n"

    def report(self, delta: int) -> int:
        """Advance the counter by ``delta`` and publish the new total."""
        completed = self.state.advance(delta)
        try:
            self.channel.send(self.format_message(completed, self.total))
        except ChannelSendError as e:
            logger.warning("Progress not delivered (%d/%d): %s", completed, self.total, e)
        return completed
