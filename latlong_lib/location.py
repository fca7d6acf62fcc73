# -*- coding: utf-8 -*-
"""Location provider abstraction.

A location provider delivers raw fixes either continuously
(``watch_position``) or one at a time (``get_current_position``).  The
sampling session only talks to the :class:`LocationProvider` protocol; the
concrete provider is chosen by whoever builds the session:

- :class:`FeedLocationProvider` -- adapter for a real device.  The host
  application pushes every fix (or failure) it receives from the platform
  location API with :meth:`~FeedLocationProvider.publish_fix` /
  :meth:`~FeedLocationProvider.publish_error`.
- :class:`FixtureLocationProvider` -- replays a fixture track on a
  scheduler.  Used for demos and tests.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Annotated
from typing import Protocol

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from latlong_lib.constants import DEFAULT_CAPTURE_TIMEOUT_MS
from latlong_lib.constants import FIXTURE_FIX_INTERVAL_MS
from latlong_lib.enums import LocationErrorCode
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.errors import ProviderError
from latlong_lib.models import LocationFix

if TYPE_CHECKING:
    from collections.abc import Sequence

    from latlong_lib.scheduling import Scheduler
    from latlong_lib.scheduling import TimerHandle

logger = logging.getLogger(__name__)

FixCallback = Callable[[LocationFix], None]
ErrorCallback = Callable[[ProviderError], None]


class PositionOptions(BaseModel):
    """Options of a single-shot position request.

    Attributes:
        high_accuracy: Ask the platform for its most accurate source
        timeout_ms: Fail with TIMEOUT if no fix arrives within this delay
        max_cache_age_ms: Accept a cached fix at most this old (0 = never)
    """

    model_config = ConfigDict(frozen=True)

    high_accuracy: bool = True
    timeout_ms: Annotated[int, Field(gt=0)] = DEFAULT_CAPTURE_TIMEOUT_MS
    max_cache_age_ms: Annotated[int, Field(ge=0)] = 0


@dataclass(frozen=True)
class WatchHandle:
    """Handle of a location subscription."""

    watch_id: int


class LocationProvider(Protocol):
    """Protocol for location providers."""

    def watch_position(
        self,
        on_fix: FixCallback,
        on_error: ErrorCallback,
    ) -> WatchHandle:
        """Subscribe to fixes until :meth:`clear_watch` is called."""
        ...

    def clear_watch(self, handle: WatchHandle) -> None:
        """End a subscription. No-op for unknown or already cleared handles."""
        ...

    def get_current_position(
        self,
        on_success: FixCallback,
        on_error: ErrorCallback,
        options: PositionOptions | None = None,
    ) -> None:
        """Request one fix. Exactly one of the callbacks is invoked, later."""
        ...


def _as_provider_error(error: ProviderError | LocationErrorCode | int) -> ProviderError:
    if isinstance(error, ProviderError):
        return error
    return ProviderError(LocationErrorCode(error))


# ---------------------------------------------------------------------------
# Host-fed provider
# ---------------------------------------------------------------------------


@dataclass
class _PendingRequest:
    on_success: FixCallback
    on_error: ErrorCallback
    timeout: TimerHandle | None = None


class FeedLocationProvider:
    """Provider fed by the host application.

    Fixes may be published from any thread; callbacks run on the publishing
    thread, outside the provider's lock.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._lock = threading.Lock()
        self._watch_ids = itertools.count(1)
        self._watchers: dict[int, tuple[FixCallback, ErrorCallback]] = {}
        self._pending: list[_PendingRequest] = []
        self._last_fix: LocationFix | None = None
        self._last_fix_ms: float | None = None

    @property
    def active_watch_count(self) -> int:
        """Number of live subscriptions."""
        with self._lock:
            return len(self._watchers)

    @property
    def pending_request_count(self) -> int:
        """Number of single-shot requests waiting for a fix."""
        with self._lock:
            return len(self._pending)

    def watch_position(self, on_fix: FixCallback, on_error: ErrorCallback) -> WatchHandle:
        with self._lock:
            watch_id = next(self._watch_ids)
            self._watchers[watch_id] = (on_fix, on_error)
        logger.debug("Location watch #%d started", watch_id)
        return WatchHandle(watch_id)

    def clear_watch(self, handle: WatchHandle) -> None:
        with self._lock:
            removed = self._watchers.pop(handle.watch_id, None)
        if removed is not None:
            logger.debug("Location watch #%d cleared", handle.watch_id)

    def get_current_position(
        self,
        on_success: FixCallback,
        on_error: ErrorCallback,
        options: PositionOptions | None = None,
    ) -> None:
        options = options or PositionOptions()
        now = self._scheduler.now_ms()

        with self._lock:
            cached = self._last_fix
            cached_ms = self._last_fix_ms

        if (
            cached is not None
            and cached_ms is not None
            and options.max_cache_age_ms > 0
            and now - cached_ms <= options.max_cache_age_ms
        ):
            self._scheduler.call_later(0, lambda: on_success(cached))
            return

        request = _PendingRequest(on_success=on_success, on_error=on_error)
        with self._lock:
            self._pending.append(request)
        request.timeout = self._scheduler.call_later(
            options.timeout_ms, lambda: self._expire(request)
        )

    def publish_fix(self, fix: LocationFix) -> None:
        """Deliver a fix to every subscriber and pending request."""
        with self._lock:
            self._last_fix = fix
            self._last_fix_ms = self._scheduler.now_ms()
            watchers = list(self._watchers.values())
            pending, self._pending = self._pending, []

        for request in pending:
            if request.timeout is not None:
                request.timeout.cancel()
            request.on_success(fix)
        for on_fix, _ in watchers:
            on_fix(fix)

    def publish_error(self, error: ProviderError | LocationErrorCode | int) -> None:
        """Deliver a platform failure to every subscriber and pending request."""
        error = _as_provider_error(error)
        logger.warning("Location provider failure: %s", error)
        with self._lock:
            watchers = list(self._watchers.values())
            pending, self._pending = self._pending, []

        for request in pending:
            if request.timeout is not None:
                request.timeout.cancel()
            request.on_error(error)
        for _, on_error in watchers:
            on_error(error)

    def _expire(self, request: _PendingRequest) -> None:
        with self._lock:
            if request not in self._pending:
                return
            self._pending.remove(request)
        request.on_error(ProviderError(LocationErrorCode.TIMEOUT))


# ---------------------------------------------------------------------------
# Fixture-backed provider
# ---------------------------------------------------------------------------

#: Demo track (latitude, longitude), a few centimetres of jitter around a point
DEMO_TRACK: tuple[tuple[float, float], ...] = (
    (-30.2555590864031, 135.421626482112),
    (-30.2555602864031, 135.421627482112),
    (-30.2555534864031, 135.421606582112),
    (-30.2555258864031, 135.421696482112),
    (-30.2555424864031, 135.421686782112),
    (-30.2555428864031, 135.421685782112),
    (-30.2555535864031, 135.421676882112),
    (-30.2555536864031, 135.421682882112),
    (-30.2555528864031, 135.421683382112),
    (-30.2555252864031, 135.421682082112),
    (-30.2555178864031, 135.421683482112),
    (-30.2555173864031, 135.421683582112),
    (-30.2555104864031, 135.421684282112),
    (-30.2555093864031, 135.421682082112),
    (-30.2555092864031, 135.421681882112),
    (-30.2555070864031, 135.421678682112),
    (-30.2555061864031, 135.421678182112),
    (-30.2555060864031, 135.421678182112),
    (-30.2555051864031, 135.421677182112),
    (-30.2555042864031, 135.421676282112),
)


def demo_fixtures() -> list[LocationFix]:
    """The demo track with a repeating accuracy pattern.

    Every third fix reports 15 m (rejected by the admission filter), the
    others between 3 and 7 m.
    """
    fixtures = []
    for step, (latitude, longitude) in enumerate(DEMO_TRACK, start=1):
        accuracy = 15.0 if step % 3 == 0 else 3.0 + step % 5
        fixtures.append(
            LocationFix(latitude=latitude, longitude=longitude, accuracy=accuracy)
        )
    return fixtures


class FixtureLocationProvider:
    """Provider replaying fixtures on a scheduler.

    Items are served in order, cycling forever, and shared between watches
    and single-shot requests.  A ``ProviderError`` (or error code) in the
    fixtures is delivered as a failure when its turn comes.

    Attributes:
        interval_ms: Delay between two fixes of a watch
    """

    def __init__(
        self,
        scheduler: Scheduler,
        fixtures: Sequence[LocationFix | ProviderError | LocationErrorCode] | None = None,
        *,
        interval_ms: float = FIXTURE_FIX_INTERVAL_MS,
    ) -> None:
        fixtures = list(fixtures) if fixtures is not None else demo_fixtures()
        if not fixtures:
            raise InvalidArgumentError("Fixture provider needs at least one fixture.")
        if interval_ms <= 0:
            raise InvalidArgumentError("Fixture interval must be positive.")

        self._scheduler = scheduler
        self._fixtures = fixtures
        self._cursor = itertools.cycle(range(len(fixtures)))
        self.interval_ms = interval_ms
        self._watch_ids = itertools.count(1)
        self._watch_timers: dict[int, TimerHandle] = {}
        self.served_count = 0

    @property
    def active_watch_count(self) -> int:
        """Number of live subscriptions."""
        return len(self._watch_timers)

    def watch_position(self, on_fix: FixCallback, on_error: ErrorCallback) -> WatchHandle:
        watch_id = next(self._watch_ids)
        self._schedule_watch(watch_id, on_fix, on_error)
        return WatchHandle(watch_id)

    def clear_watch(self, handle: WatchHandle) -> None:
        timer = self._watch_timers.pop(handle.watch_id, None)
        if timer is not None:
            timer.cancel()

    def get_current_position(
        self,
        on_success: FixCallback,
        on_error: ErrorCallback,
        options: PositionOptions | None = None,  # noqa: ARG002
    ) -> None:
        self._scheduler.call_later(0, lambda: self._serve(on_success, on_error))

    def _schedule_watch(
        self,
        watch_id: int,
        on_fix: FixCallback,
        on_error: ErrorCallback,
    ) -> None:
        def _emit() -> None:
            if watch_id not in self._watch_timers:
                return
            self._schedule_watch(watch_id, on_fix, on_error)
            self._serve(on_fix, on_error)

        self._watch_timers[watch_id] = self._scheduler.call_later(
            self.interval_ms, _emit
        )

    def _serve(self, on_fix: FixCallback, on_error: ErrorCallback) -> None:
        item = self._fixtures[next(self._cursor)]
        self.served_count += 1
        if isinstance(item, LocationFix):
            on_fix(item.model_copy(update={"timestamp_ms": self._scheduler.now_ms()}))
        else:
            on_error(_as_provider_error(item))
