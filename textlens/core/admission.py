"""Bounded-concurrency admission queue.

Wraps arbitrary async work units and enforces an admission policy:

- At most ``max_concurrent`` units execute at once.
- Up to ``max_queue_size`` further units wait, FIFO, for a free slot.
- Anything beyond that is rejected with ``CapacityExceededError`` before
  the work is ever invoked.

The queue is domain-agnostic. It knows nothing about what the work does and
never wraps, retries or times out the work's own outcome: a unit's result or
exception is handed back to its caller unchanged, after the slot is released.

Concurrency model:
    State (``_in_flight`` and ``_waiters``) is only touched from the event
    loop thread, between suspension points, so no lock is needed. The only
    place ``submit`` suspends before running work is ``await waiter``.
    Porting this to preemptive threads requires a mutex around both fields.

Slot hand-off:
    When a unit settles and a waiter exists, the slot is handed directly to
    the oldest waiter inside ``_release``: the finishing unit's decrement and
    the waiter's increment happen in the same synchronous step. A submission
    arriving between the release and the waiter resuming therefore sees the
    queue as full and cannot overtake it.

Precondition:
    Submitted work must eventually settle. A unit that hangs holds its slot
    forever; the queue provides no forced cancellation.

Usage:
    queue = AdmissionQueue(max_concurrent=10, max_queue_size=100)

    try:
        result = await queue.submit(lambda: do_work(payload))
    except CapacityExceededError:
        ...  # ask the client to retry later
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from textlens.core.logging import get_logger
from textlens.core.metrics import record_admission_outcome, record_admission_state

logger = get_logger(__name__)

T = TypeVar("T")


class CapacityExceededError(Exception):
    """Raised when both the concurrency limit and the queue are saturated."""

    def __init__(
        self,
        message: str = "Server at capacity, please try again later",
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


@dataclass(frozen=True)
class QueueStatus:
    """Point-in-time snapshot of queue occupancy."""

    in_flight: int
    queued: int
    max_concurrent: int
    max_queue_size: int

    @property
    def at_capacity(self) -> bool:
        """True when the next submission would be rejected."""
        return (
            self.in_flight >= self.max_concurrent
            and self.queued >= self.max_queue_size
        )


class AdmissionQueue:
    """Bounded-concurrency, bounded-queue executor for async work units."""

    def __init__(
        self,
        max_concurrent: int,
        max_queue_size: int,
        *,
        name: str = "default",
    ) -> None:
        """Initialize the queue.

        Args:
            max_concurrent: Maximum units executing at once (>= 1)
            max_queue_size: Maximum units waiting for a slot (>= 0)
            name: Label used in logs and metrics

        Raises:
            ValueError: If a limit is out of range
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        if max_queue_size < 0:
            raise ValueError(f"max_queue_size must be >= 0, got {max_queue_size}")

        self._name = name
        self._max_concurrent = max_concurrent
        self._max_queue_size = max_queue_size
        self._in_flight = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def max_queue_size(self) -> int:
        return self._max_queue_size

    @property
    def in_flight(self) -> int:
        """Number of units currently holding a slot."""
        return self._in_flight

    @property
    def queued(self) -> int:
        """Number of units waiting for a slot."""
        return len(self._waiters)

    def status(self) -> QueueStatus:
        """Return a snapshot of the queue's occupancy."""
        return QueueStatus(
            in_flight=self._in_flight,
            queued=len(self._waiters),
            max_concurrent=self._max_concurrent,
            max_queue_size=self._max_queue_size,
        )

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    async def submit(self, work: Callable[[], Awaitable[T]]) -> T:
        """Run ``work`` once a slot is available.

        Args:
            work: Zero-argument callable returning an awaitable

        Returns:
            Whatever ``work()`` resolves to

        Raises:
            CapacityExceededError: Concurrency and queue limits are both
                saturated. Raised before suspending; ``work`` is not called.
            Exception: Anything ``work()`` raises, unchanged
        """
        if self._in_flight < self._max_concurrent:
            self._in_flight += 1
        elif len(self._waiters) < self._max_queue_size:
            await self._wait_for_slot()
        else:
            self._reject()

        record_admission_outcome(self._name, admitted=True)
        self._publish_state()
        logger.debug(
            "Work unit started",
            queue=self._name,
            in_flight=self._in_flight,
            queued=len(self._waiters),
        )

        try:
            return await work()
        finally:
            self._release()

    async def _wait_for_slot(self) -> None:
        """Park the caller until a finishing unit hands over its slot.

        On return the slot is already counted in ``_in_flight``.
        """
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self._publish_state()
        logger.info(
            "Work unit queued",
            queue=self._name,
            position=len(self._waiters),
            in_flight=self._in_flight,
        )

        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The slot was handed over just before the caller went away;
                # pass it on instead of leaking it.
                self._release()
            else:
                self._discard_waiter(waiter)
            raise

    def _reject(self) -> None:
        record_admission_outcome(self._name, admitted=False)
        logger.error(
            "Queue capacity exceeded",
            queue=self._name,
            in_flight=self._in_flight,
            queued=len(self._waiters),
            max_concurrent=self._max_concurrent,
            max_queue_size=self._max_queue_size,
        )
        raise CapacityExceededError(
            details={
                "max_concurrent": self._max_concurrent,
                "max_queue_size": self._max_queue_size,
            }
        )

    def _release(self) -> None:
        """Free one slot, handing it to the oldest live waiter if any."""
        self._in_flight -= 1

        while self._waiters:
            waiter = self._waiters.popleft()
            if waiter.done():
                # Cancelled while parked; it no longer wants the slot.
                continue
            self._in_flight += 1
            waiter.set_result(None)
            logger.debug(
                "Released queued work unit",
                queue=self._name,
                in_flight=self._in_flight,
                queued=len(self._waiters),
            )
            break

        self._publish_state()

    def _discard_waiter(self, waiter: asyncio.Future[None]) -> None:
        try:
            self._waiters.remove(waiter)
        except ValueError:
            pass
        self._publish_state()

    def _publish_state(self) -> None:
        record_admission_state(self._name, self._in_flight, len(self._waiters))
