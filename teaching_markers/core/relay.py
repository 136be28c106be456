"""
Publish relay: ordered hand-off from callback contexts to the publisher.

Interactive marker feedback arrives on executor callbacks that must not
wait on the network. The relay accepts TransformMessages from any number of
producers into one marker-tagged FIFO queue and a single consumer thread
publishes them strictly in arrival order. Nothing is coalesced: every
submitted message produces exactly one publish call.

One relay is shared by all markers, so the thread count does not grow with
the number of markers. By default the queue is unbounded and every
submitted message is published. A capacity can be set; when the bounded
queue is full the overflow policy decides what happens:

    block        make the producer wait for space (default, loses nothing)
    drop_oldest  evict the oldest queued message
    reject       refuse the new message
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Optional

from teaching_markers.common import constants
from teaching_markers.core.tf_types import PublishQueueEntry, TransformMessage


class OverflowPolicy(Enum):
    DROP_OLDEST = constants.RELAY_POLICY_DROP_OLDEST
    REJECT = constants.RELAY_POLICY_REJECT
    BLOCK = constants.RELAY_POLICY_BLOCK

    @classmethod
    def parse(cls, value: str) -> "OverflowPolicy":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown relay overflow policy '{value}' (expected one of: {valid})")


class PublishRelay:
    """Single-consumer FIFO relay in front of a publish callable."""

    def __init__(
        self,
        publish: Callable[[TransformMessage], None],
        capacity: int = constants.RELAY_QUEUE_CAPACITY_DEFAULT,
        overflow_policy: OverflowPolicy = OverflowPolicy.BLOCK,
        logger: Optional[Any] = None,
        name: str = "publish_relay",
    ):
        """
        Args:
            publish: Called from the consumer thread once per message
            capacity: Maximum queued messages (0 = unbounded)
            overflow_policy: Behaviour when the queue is full
            logger: Logger-like object (rclpy or logging); defaults to module logger
            name: Consumer thread name
        """
        if capacity < 0:
            raise ValueError(f"Relay capacity must be >= 0, got {capacity}")
        self._publish = publish
        self.capacity = int(capacity)
        self.overflow_policy = overflow_policy
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.name = name

        self._queue: Deque[PublishQueueEntry] = deque()
        self._cond = threading.Condition()
        self._in_flight = 0
        self._running = False
        self._thread: Optional[threading.Thread] = None

        self.submitted_count = 0
        self.published_count = 0
        self.dropped_count = 0
        self.failed_count = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        with self._cond:
            if self._running:
                return
            self._running = True
        self._thread = threading.Thread(target=self._consume, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = constants.RELAY_SHUTDOWN_TIMEOUT_SEC) -> None:
        """Stop accepting work, publish what is queued, then join the consumer."""
        with self._cond:
            if not self._running:
                return
            self._running = False
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                self.logger.warning(
                    f"{self.name}: consumer still publishing after {timeout}s, "
                    f"{len(self._queue)} message(s) left"
                )
            self._thread = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending(self) -> int:
        with self._cond:
            return len(self._queue) + self._in_flight

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def submit(self, marker_name: str, message: TransformMessage) -> bool:
        """
        Enqueue a message for publication.

        Returns:
            True if the message was queued, False if it was refused
            (reject policy, or relay not running).
        """
        entry = PublishQueueEntry(marker_name=marker_name, message=message)
        with self._cond:
            if not self._running:
                self.logger.warning(f"{self.name}: not running, dropping update for '{marker_name}'")
                self.dropped_count += 1
                return False

            if self._is_full():
                if self.overflow_policy is OverflowPolicy.REJECT:
                    self.dropped_count += 1
                    self.logger.warning(
                        f"{self.name}: queue full ({self.capacity}), rejecting update for '{marker_name}'"
                    )
                    return False
                if self.overflow_policy is OverflowPolicy.DROP_OLDEST:
                    evicted = self._queue.popleft()
                    self.dropped_count += 1
                    self.logger.warning(
                        f"{self.name}: queue full ({self.capacity}), "
                        f"dropping oldest update for '{evicted.marker_name}'"
                    )
                else:
                    while self._running and self._is_full():
                        self._cond.wait()
                    if not self._running:
                        self.dropped_count += 1
                        return False

            self._queue.append(entry)
            self.submitted_count += 1
            self._cond.notify_all()
        return True

    def _is_full(self) -> bool:
        return self.capacity > 0 and len(self._queue) >= self.capacity

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every queued message has been handed to publish."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._queue or self._in_flight:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._cond.wait(remaining)
        return True

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def _consume(self) -> None:
        while True:
            with self._cond:
                while self._running and not self._queue:
                    self._cond.wait()
                if not self._queue:
                    # Stopped and drained
                    return
                entry = self._queue.popleft()
                self._in_flight += 1
                self._cond.notify_all()

            try:
                self._publish(entry.message)
            except Exception as e:
                self.failed_count += 1
                self.logger.error(
                    f"{self.name}: failed to publish transform for '{entry.marker_name}': {e}"
                )
            else:
                self.published_count += 1
            finally:
                with self._cond:
                    self._in_flight -= 1
                    self._cond.notify_all()
