# -*- coding: utf-8 -*-
"""Clock and timer abstraction.

Sampling sessions never touch the wall clock or the event loop directly:
they receive a ``Scheduler``.  Two implementations are provided:

- :class:`AsyncioScheduler` -- real time, timers run on an asyncio loop.
- :class:`ManualScheduler` -- virtual time, advanced explicitly.  Used to
  drive sessions deterministically in tests.

Cancelling a timer is always idempotent: cancelling an already-cancelled or
already-fired timer is a no-op.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import TYPE_CHECKING
from typing import Protocol

from latlong_lib.errors import InvalidArgumentError
from latlong_lib.validation import is_finite_number

if TYPE_CHECKING:
    from collections.abc import Callable


class TimerHandle:
    """Handle of a scheduled callback."""

    def __init__(self, on_cancel: Callable[[], None] | None = None) -> None:
        self._on_cancel = on_cancel
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        """True while the callback is still due to run."""
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        """Cancel the timer. No-op if already cancelled or fired."""
        if not self.active:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
            self._on_cancel = None

    def _mark_fired(self) -> None:
        self._fired = True
        self._on_cancel = None


class Scheduler(Protocol):
    """Protocol for clocks able to run delayed callbacks."""

    def now_ms(self) -> float:
        """Current monotonic time in milliseconds."""
        ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once, ``delay_ms`` milliseconds from now."""
        ...


def _validate_delay(delay_ms: float) -> None:
    if not is_finite_number(delay_ms) or delay_ms < 0:
        raise InvalidArgumentError(
            f"Timer delay must be a finite, non-negative number, got {delay_ms}"
        )


# ---------------------------------------------------------------------------
# Virtual time
# ---------------------------------------------------------------------------


class ManualScheduler:
    """Scheduler whose clock only moves when :meth:`advance` is called.

    Timers fire in deadline order (ties in scheduling order), and the clock
    reads exactly the deadline of the timer being fired.  Cancelled timers
    are dropped from the queue once they make up half of it.
    """

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now_ms = float(start_ms)
        self._queue: list[tuple[float, int, TimerHandle, Callable[[], None]]] = []
        self._sequence = itertools.count()
        self._cancelled_count = 0

    def now_ms(self) -> float:
        return self._now_ms

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        _validate_delay(delay_ms)
        handle = TimerHandle(on_cancel=self._on_timer_cancelled)
        heapq.heappush(
            self._queue,
            (self._now_ms + delay_ms, next(self._sequence), handle, callback),
        )
        return handle

    @property
    def pending_count(self) -> int:
        """Number of timers still due to run."""
        return len(self._queue) - self._cancelled_count

    @property
    def queued_count(self) -> int:
        """Number of queue entries, cancelled ones included."""
        return len(self._queue)

    def _on_timer_cancelled(self) -> None:
        self._cancelled_count += 1
        if self._cancelled_count * 2 >= len(self._queue):
            self._queue[:] = [entry for entry in self._queue if entry[2].active]
            heapq.heapify(self._queue)
            self._cancelled_count = 0

    def advance(self, delta_ms: float) -> None:
        """Move the clock forward, firing every timer that falls due.

        Timers scheduled by a firing callback also run if they fall due
        before the end of the interval.
        """
        _validate_delay(delta_ms)
        target = self._now_ms + delta_ms
        while self._queue and self._queue[0][0] <= target:
            deadline, _, handle, callback = heapq.heappop(self._queue)
            if not handle.active:
                self._cancelled_count -= 1
                continue
            self._now_ms = max(self._now_ms, deadline)
            handle._mark_fired()  # noqa: SLF001
            callback()
        self._now_ms = target

    def advance_to(self, time_ms: float) -> None:
        """Move the clock to an absolute time (never backwards)."""
        self.advance(max(0.0, time_ms - self._now_ms))


# ---------------------------------------------------------------------------
# Real time
# ---------------------------------------------------------------------------


class AsyncioScheduler:
    """Scheduler running timers on an asyncio event loop.

    Must be created from within a running loop unless ``loop`` is given.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def now_ms(self) -> float:
        return self._loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        _validate_delay(delay_ms)
        asyncio_handle: asyncio.TimerHandle | None = None
        handle = TimerHandle(on_cancel=lambda: asyncio_handle.cancel())

        def _fire() -> None:
            handle._mark_fired()  # noqa: SLF001
            callback()

        asyncio_handle = self._loop.call_later(delay_ms / 1000.0, _fire)
        return handle
