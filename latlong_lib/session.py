# -*- coding: utf-8 -*-
"""Accurate-position sampling sessions.

A session turns a stream of noisy location fixes into one refined position:

1. ``warmup``: the location subscription is open but every fix is ignored
   while the device's location subsystem stabilizes.
2. ``collecting``: each fix is classified by the admission filter
   (accuracy <= 10 m).  Accepted fixes feed the weighted estimator.
3. ``complete`` (success) or ``error`` (``PositionUnavailableError`` when no
   fix was accepted, ``ProviderError`` when the provider failed).

With ``confirm_before_finalize`` the session stops in
``awaiting_confirmation`` after collection, where the caller can remove
outliers, capture extra batches of serial fixes (``extending``) and finally
``confirm()``.  ``cancel()`` is accepted in every phase and silences the
session for good.

All inputs (timers, provider callbacks, caller requests) are turned into
events and go through :meth:`SamplingSession.dispatch`, which owns every
state transition.  Phase boundaries are wall-clock based: they are driven by
timers and re-checked before each event, so a sparse provider never stalls a
session.

Example::

    scheduler = AsyncioScheduler()
    controller = SamplingSessionController(scheduler, FeedLocationProvider(scheduler))
    session = controller.start(
        SessionConfig(warmup_ms=5_000, collection_ms=20_000),
        SessionCallbacks(on_success=print, on_error=print),
    )
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Annotated

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from latlong_lib.constants import DEFAULT_COLLECTION_MS
from latlong_lib.constants import DEFAULT_EXTENSION_BATCH_SIZE
from latlong_lib.constants import DEFAULT_EXTENSION_CAPTURE_DELAY_MS
from latlong_lib.constants import DEFAULT_PROGRESS_INTERVAL_MS
from latlong_lib.constants import DEFAULT_TARGET_SAMPLES
from latlong_lib.constants import DEFAULT_WARMUP_MS
from latlong_lib.constants import MAX_ACCEPTABLE_ACCURACY_M
from latlong_lib.enums import SessionPhase
from latlong_lib.errors import InvalidArgumentError
from latlong_lib.errors import LatLongError
from latlong_lib.errors import PositionUnavailableError
from latlong_lib.errors import ProviderError
from latlong_lib.errors import SessionStateError
from latlong_lib.estimator import compute_weighted_average
from latlong_lib.location import PositionOptions
from latlong_lib.models import GeoLocation
from latlong_lib.models import LocationFix
from latlong_lib.models import LocationSample

if TYPE_CHECKING:
    from latlong_lib.location import LocationProvider
    from latlong_lib.location import WatchHandle
    from latlong_lib.scheduling import Scheduler
    from latlong_lib.scheduling import TimerHandle

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration, progress and result
# ---------------------------------------------------------------------------


class SessionConfig(BaseModel):
    """Parameters of a sampling session.

    Attributes:
        warmup_ms: Duration of the warm-up phase
        collection_ms: Duration of the collection window
        progress_interval_ms: Period of the progress reports emitted between
            fixes (0 disables them, progress is then only reported per fix)
        confirm_before_finalize: Stop in ``awaiting_confirmation`` instead of
            completing right after collection
        target_samples: Expected number of accepted samples (display only)
        extension_batch_size: Number of serial captures per extension batch
        extension_capture_delay_ms: Delay between two serial captures
        capture_options: Options of the serial captures
    """

    model_config = ConfigDict(frozen=True)

    warmup_ms: Annotated[int, Field(ge=0)] = DEFAULT_WARMUP_MS
    collection_ms: Annotated[int, Field(gt=0)] = DEFAULT_COLLECTION_MS
    progress_interval_ms: Annotated[int, Field(ge=0)] = DEFAULT_PROGRESS_INTERVAL_MS
    confirm_before_finalize: bool = False
    target_samples: Annotated[int, Field(ge=0)] = DEFAULT_TARGET_SAMPLES
    extension_batch_size: Annotated[int, Field(gt=0)] = DEFAULT_EXTENSION_BATCH_SIZE
    extension_capture_delay_ms: Annotated[int, Field(ge=0)] = (
        DEFAULT_EXTENSION_CAPTURE_DELAY_MS
    )
    capture_options: PositionOptions = PositionOptions()

    @property
    def max_acceptable_accuracy_m(self) -> float:
        """Admission threshold, fixed."""
        return MAX_ACCEPTABLE_ACCURACY_M


@dataclass(frozen=True)
class SessionProgress:
    """Snapshot of a session, delivered to ``on_progress``.

    Attributes:
        phase: Current phase
        elapsed_ms: Time since the session started
        remaining_ms: Time left in the current timed phase (0 otherwise)
        samples_accepted: Number of accepted samples
        samples_discarded: Number of fixes rejected by the admission filter
        latest_accuracy: Accuracy of the last fix received, if any
        average: Current weighted average, if any sample was accepted
        target_samples: Effective target sample count
    """

    phase: SessionPhase
    elapsed_ms: float
    remaining_ms: float
    samples_accepted: int
    samples_discarded: int
    latest_accuracy: float | None
    average: GeoLocation | None
    target_samples: int


@dataclass(frozen=True)
class SessionResult:
    """Successful outcome of a session.

    Attributes:
        latitude: Weighted average latitude
        longitude: Weighted average longitude
        samples_used: Number of samples in the average
        samples_discarded: Number of fixes rejected by the admission filter
        duration_ms: Time from the start of collection to finalization
        samples: The samples in the average, in acceptance order
    """

    latitude: float
    longitude: float
    samples_used: int
    samples_discarded: int
    duration_ms: float
    samples: tuple[LocationSample, ...]

    @property
    def location(self) -> GeoLocation:
        return GeoLocation(latitude=self.latitude, longitude=self.longitude)


@dataclass
class SessionCallbacks:
    """Callbacks of a session. Every callback is optional.

    ``on_success`` and ``on_error`` are terminal: exactly one of them is
    invoked, last, unless the session is cancelled (then none is).
    """

    on_progress: Callable[[SessionProgress], None] | None = None
    on_sample_accepted: Callable[[LocationFix], None] | None = None
    on_success: Callable[[SessionResult], None] | None = None
    on_error: Callable[[LatLongError], None] | None = None


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WarmupElapsed:
    pass


@dataclass(frozen=True)
class CollectionElapsed:
    pass


@dataclass(frozen=True)
class ProgressTick:
    pass


@dataclass(frozen=True)
class FixReceived:
    fix: LocationFix


@dataclass(frozen=True)
class ProviderFailed:
    error: ProviderError


@dataclass(frozen=True)
class CaptureDue:
    pass


@dataclass(frozen=True)
class CaptureReceived:
    fix: LocationFix
    request_id: int


@dataclass(frozen=True)
class CaptureFailed:
    error: ProviderError
    request_id: int


@dataclass(frozen=True)
class ExtendRequested:
    pass


@dataclass(frozen=True)
class RemoveRequested:
    index: int


@dataclass(frozen=True)
class ConfirmRequested:
    pass


@dataclass(frozen=True)
class CancelRequested:
    pass


SessionEvent = (
    WarmupElapsed
    | CollectionElapsed
    | ProgressTick
    | FixReceived
    | ProviderFailed
    | CaptureDue
    | CaptureReceived
    | CaptureFailed
    | ExtendRequested
    | RemoveRequested
    | ConfirmRequested
    | CancelRequested
)

_REMOVABLE_PHASES = (
    SessionPhase.COLLECTING,
    SessionPhase.AWAITING_CONFIRMATION,
    SessionPhase.EXTENDING,
)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class SamplingSession:
    """A single accurate-position sampling session.

    Sessions are created with :meth:`SamplingSessionController.start` (or
    built directly and then :meth:`start`-ed).  The session subscribes to
    the provider and arms its timers on start.
    """

    def __init__(
        self,
        session_id: int,
        scheduler: Scheduler,
        provider: LocationProvider,
        config: SessionConfig | None = None,
        callbacks: SessionCallbacks | None = None,
        on_finished: Callable[[SamplingSession], None] | None = None,
    ) -> None:
        self.session_id = session_id
        self.config = config or SessionConfig()
        self._scheduler = scheduler
        self._provider = provider
        self._callbacks = callbacks or SessionCallbacks()
        self._on_finished = on_finished
        self._lock = threading.RLock()

        self._phase: SessionPhase | None = None
        self._started_ms = 0.0
        self._collecting_started_ms: float | None = None
        self._samples: list[LocationSample] = []
        self._samples_discarded = 0
        self._average: GeoLocation | None = None
        self._latest_accuracy: float | None = None
        self._target_samples = self.config.target_samples

        self._watch: WatchHandle | None = None
        self._timers: dict[str, TimerHandle] = {}
        self._captures_remaining = 0
        self._capture_ids = itertools.count(1)
        self._pending_capture: int | None = None

    def __repr__(self) -> str:
        return f"SamplingSession(id={self.session_id}, phase={self._phase})"

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        if self._phase is None:
            raise SessionStateError("Session has not been started.")
        return self._phase

    @property
    def is_finished(self) -> bool:
        return self._phase is not None and self._phase.is_terminal

    @property
    def samples(self) -> tuple[LocationSample, ...]:
        """Accepted samples, in acceptance order."""
        return tuple(self._samples)

    @property
    def samples_discarded(self) -> int:
        return self._samples_discarded

    @property
    def average(self) -> GeoLocation | None:
        """Current weighted average of the accepted samples."""
        return self._average

    @property
    def target_samples(self) -> int:
        """Effective target sample count."""
        return self._target_samples

    @property
    def elapsed_ms(self) -> float:
        if self._phase is None:
            return 0.0
        return self._scheduler.now_ms() - self._started_ms

    @property
    def warmup_ends_ms(self) -> float:
        return self._started_ms + self.config.warmup_ms

    @property
    def collection_ends_ms(self) -> float:
        return self.warmup_ends_ms + self.config.collection_ms

    def progress(self) -> SessionProgress:
        """Snapshot of the session."""
        now = self._scheduler.now_ms()
        match self._phase:
            case SessionPhase.WARMUP:
                remaining = self.warmup_ends_ms - now
            case SessionPhase.COLLECTING:
                remaining = self.collection_ends_ms - now
            case _:
                remaining = 0.0
        return SessionProgress(
            phase=self.phase,
            elapsed_ms=self.elapsed_ms,
            remaining_ms=max(0.0, remaining),
            samples_accepted=len(self._samples),
            samples_discarded=self._samples_discarded,
            latest_accuracy=self._latest_accuracy,
            average=self._average,
            target_samples=self._target_samples,
        )

    # -------------------------------------------------------------------------
    # Caller operations
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to the provider and arm the phase timers.

        Raises:
            SessionStateError: If the session was already started
        """
        with self._lock:
            if self._phase is not None:
                raise SessionStateError("Session was already started.")

            self._phase = SessionPhase.WARMUP
            self._started_ms = self._scheduler.now_ms()
            logger.info(
                "Sampling session #%d started (warm-up %d ms, collection %d ms)",
                self.session_id,
                self.config.warmup_ms,
                self.config.collection_ms,
            )

            watch = self._provider.watch_position(
                lambda fix: self.dispatch(FixReceived(fix)),
                lambda error: self.dispatch(ProviderFailed(error)),
            )
            if self._phase.is_terminal:
                # The provider reported a failure while subscribing
                self._provider.clear_watch(watch)
                return
            self._watch = watch
            self._arm("warmup", self.config.warmup_ms, WarmupElapsed())
            self._arm(
                "collection",
                self.config.warmup_ms + self.config.collection_ms,
                CollectionElapsed(),
            )
            self._arm_progress_tick()

    def cancel(self) -> None:
        """Stop the session. No further callback is invoked.

        No-op on a finished session.
        """
        self.dispatch(CancelRequested())

    def extend_by_batch(self) -> None:
        """Capture one more batch of serial fixes before finalizing.

        Raises:
            SessionStateError: If the session is not awaiting confirmation or
                already extending
        """
        self.dispatch(ExtendRequested())

    def remove_sample(self, index: int) -> None:
        """Drop an accepted sample (e.g. an outlier) and recompute the average.

        Raises:
            InvalidArgumentError: If ``index`` is not a valid sample index
            SessionStateError: If the session phase does not allow removal
        """
        self.dispatch(RemoveRequested(index))

    def confirm(self) -> None:
        """Finalize a session awaiting confirmation.

        Raises:
            SessionStateError: If the session is not awaiting confirmation
        """
        self.dispatch(ConfirmRequested())

    # -------------------------------------------------------------------------
    # Event dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, event: SessionEvent) -> None:
        """Apply one event to the session.

        Timer and provider events reaching a finished session are ignored.

        Raises:
            SessionStateError: If a caller request is not allowed in the
                current phase
            InvalidArgumentError: If a removal targets an unknown sample
        """
        with self._lock:
            if self._phase is None:
                raise SessionStateError("Session has not been started.")

            if not self._phase.is_terminal:
                self._check_deadlines()

            if self._phase.is_terminal:
                match event:
                    case ExtendRequested() | RemoveRequested() | ConfirmRequested():
                        raise SessionStateError(
                            f"Session is {self._phase.value}, nothing left to do."
                        )
                    case _:
                        return

            match event:
                case WarmupElapsed() | CollectionElapsed():
                    # Handled by the deadline check above
                    pass

                case ProgressTick():
                    if self._phase in (SessionPhase.WARMUP, SessionPhase.COLLECTING):
                        self._arm_progress_tick()
                        self._emit_progress()

                case FixReceived(fix=fix):
                    self._on_fix(fix)

                case ProviderFailed(error=error):
                    self._fail(error)

                case CaptureDue():
                    if self._phase is SessionPhase.EXTENDING:
                        self._request_capture()

                case CaptureReceived(fix=fix, request_id=request_id):
                    if request_id == self._pending_capture:
                        self._on_capture(fix)

                case CaptureFailed(error=error, request_id=request_id):
                    if request_id == self._pending_capture:
                        self._fail(error)

                case ExtendRequested():
                    self._extend()

                case RemoveRequested(index=index):
                    self._remove(index)

                case ConfirmRequested():
                    if self._phase is not SessionPhase.AWAITING_CONFIRMATION:
                        raise SessionStateError(
                            f"Cannot confirm a session in phase {self._phase.value}."
                        )
                    self._finalize()

                case CancelRequested():
                    self._cancel()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _check_deadlines(self) -> None:
        now = self._scheduler.now_ms()
        if self._phase is SessionPhase.WARMUP and now >= self.warmup_ends_ms:
            self._enter_collecting()
        if self._phase is SessionPhase.COLLECTING and now >= self.collection_ends_ms:
            self._end_collection()

    def _enter_collecting(self) -> None:
        self._phase = SessionPhase.COLLECTING
        self._collecting_started_ms = self.warmup_ends_ms
        logger.info("Sampling session #%d: collecting", self.session_id)

    def _end_collection(self) -> None:
        self._stop_watch()
        self._cancel_timers()
        logger.info(
            "Sampling session #%d: collection ended (%d accepted, %d discarded)",
            self.session_id,
            len(self._samples),
            self._samples_discarded,
        )
        if self.config.confirm_before_finalize and self._samples:
            self._phase = SessionPhase.AWAITING_CONFIRMATION
            self._emit_progress()
            return
        self._finalize()

    def _on_fix(self, fix: LocationFix) -> None:
        if self._phase is not SessionPhase.COLLECTING:
            # Warm-up fixes are ignored entirely. Later phases no longer
            # listen to the subscription.
            return
        self._latest_accuracy = fix.accuracy
        self._classify(fix)
        self._emit_progress()

    def _classify(self, fix: LocationFix) -> None:
        if not 0 < fix.accuracy <= MAX_ACCEPTABLE_ACCURACY_M:
            self._samples_discarded += 1
            logger.debug(
                "Session #%d: discarded fix (accuracy %s m)",
                self.session_id,
                fix.accuracy,
            )
            return

        samples = [*self._samples, fix.to_sample()]
        self._average = compute_weighted_average(samples)
        self._samples = samples
        logger.debug(
            "Session #%d: accepted fix #%d (accuracy %s m)",
            self.session_id,
            len(self._samples),
            fix.accuracy,
        )
        if self._callbacks.on_sample_accepted is not None:
            self._callbacks.on_sample_accepted(fix)

    def _extend(self) -> None:
        batch = self.config.extension_batch_size
        match self._phase:
            case SessionPhase.AWAITING_CONFIRMATION:
                self._phase = SessionPhase.EXTENDING
                self._captures_remaining = batch
                self._target_samples += batch
                logger.info(
                    "Sampling session #%d: extending by %d captures",
                    self.session_id,
                    batch,
                )
                self._emit_progress()
                if self._phase is SessionPhase.EXTENDING:
                    self._request_capture()
            case SessionPhase.EXTENDING:
                self._captures_remaining += batch
                self._target_samples += batch
                self._emit_progress()
            case _:
                raise SessionStateError(
                    f"Cannot extend a session in phase {self._phase.value}."
                )

    def _request_capture(self) -> None:
        request_id = next(self._capture_ids)
        self._pending_capture = request_id
        self._provider.get_current_position(
            lambda fix: self.dispatch(CaptureReceived(fix, request_id)),
            lambda error: self.dispatch(CaptureFailed(error, request_id)),
            self.config.capture_options,
        )

    def _on_capture(self, fix: LocationFix) -> None:
        self._pending_capture = None
        self._latest_accuracy = fix.accuracy
        self._captures_remaining -= 1
        self._classify(fix)
        if self._phase.is_terminal:
            return

        if self._captures_remaining > 0:
            self._arm("capture", self.config.extension_capture_delay_ms, CaptureDue())
        else:
            self._phase = SessionPhase.AWAITING_CONFIRMATION
            logger.info("Sampling session #%d: extension done", self.session_id)
        self._emit_progress()

    def _remove(self, index: int) -> None:
        if self._phase not in _REMOVABLE_PHASES:
            raise SessionStateError(
                f"Cannot remove a sample from a session in phase {self._phase.value}."
            )
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidArgumentError(f"Sample index must be an integer, got {index!r}")
        if not 0 <= index < len(self._samples):
            raise InvalidArgumentError(
                f"No sample at index {index} ({len(self._samples)} accepted)."
            )

        samples = self._samples[:index] + self._samples[index + 1 :]
        self._average = compute_weighted_average(samples)
        self._samples = samples
        self._target_samples = max(0, self._target_samples - 1)
        logger.info("Sampling session #%d: removed sample %d", self.session_id, index)
        self._emit_progress()

    def _finalize(self) -> None:
        if self._average is None:
            self._fail(
                PositionUnavailableError(
                    "No location fix met the accuracy requirement "
                    f"(<= {MAX_ACCEPTABLE_ACCURACY_M:g} m)."
                )
            )
            return

        now = self._scheduler.now_ms()
        result = SessionResult(
            latitude=self._average.latitude,
            longitude=self._average.longitude,
            samples_used=len(self._samples),
            samples_discarded=self._samples_discarded,
            duration_ms=now - (self._collecting_started_ms or self._started_ms),
            samples=tuple(self._samples),
        )
        self._terminate(SessionPhase.COMPLETE)
        logger.info(
            "Sampling session #%d complete: %s, %s from %d samples",
            self.session_id,
            result.latitude,
            result.longitude,
            result.samples_used,
        )
        if self._callbacks.on_success is not None:
            self._callbacks.on_success(result)

    def _fail(self, error: LatLongError) -> None:
        self._terminate(SessionPhase.ERROR)
        logger.warning("Sampling session #%d failed: %s", self.session_id, error)
        if self._callbacks.on_error is not None:
            self._callbacks.on_error(error)

    def _cancel(self) -> None:
        self._samples.clear()
        self._average = None
        self._terminate(SessionPhase.CANCELLED)
        logger.info("Sampling session #%d cancelled", self.session_id)

    def _terminate(self, phase: SessionPhase) -> None:
        self._phase = phase
        self._stop_watch()
        self._cancel_timers()
        self._pending_capture = None
        self._captures_remaining = 0
        if self._on_finished is not None:
            self._on_finished(self)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    def _arm(self, name: str, delay_ms: float, event: SessionEvent) -> None:
        if (previous := self._timers.get(name)) is not None:
            previous.cancel()
        self._timers[name] = self._scheduler.call_later(
            max(0.0, delay_ms), lambda: self.dispatch(event)
        )

    def _arm_progress_tick(self) -> None:
        if self.config.progress_interval_ms > 0:
            self._arm("progress", self.config.progress_interval_ms, ProgressTick())

    def _cancel_timers(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def _stop_watch(self) -> None:
        if self._watch is not None:
            self._provider.clear_watch(self._watch)
            self._watch = None

    def _emit_progress(self) -> None:
        # A callback may have cancelled the session
        if self._phase.is_terminal:
            return
        if self._callbacks.on_progress is not None:
            self._callbacks.on_progress(self.progress())


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class SamplingSessionController:
    """Starts sampling sessions and keeps track of the live ones.

    Attributes:
        scheduler: Clock and timers shared by the sessions
        provider: Location provider shared by the sessions
    """

    def __init__(self, scheduler: Scheduler, provider: LocationProvider) -> None:
        self.scheduler = scheduler
        self.provider = provider
        self._session_ids = itertools.count(1)
        self._live: dict[int, SamplingSession] = {}

    @property
    def live_sessions(self) -> tuple[SamplingSession, ...]:
        """Sessions that have not reached a terminal phase."""
        return tuple(self._live.values())

    def start(
        self,
        config: SessionConfig | None = None,
        callbacks: SessionCallbacks | None = None,
    ) -> SamplingSession:
        """Start a new session."""
        session = SamplingSession(
            next(self._session_ids),
            self.scheduler,
            self.provider,
            config=config,
            callbacks=callbacks,
            on_finished=self._forget,
        )
        self._live[session.session_id] = session
        session.start()
        return session

    def cancel(self, session: SamplingSession) -> None:
        session.cancel()

    def extend_by_batch(self, session: SamplingSession) -> None:
        session.extend_by_batch()

    def remove_sample(self, session: SamplingSession, index: int) -> None:
        session.remove_sample(index)

    def confirm(self, session: SamplingSession) -> None:
        session.confirm()

    def cancel_all(self) -> None:
        """Cancel every live session."""
        for session in self.live_sessions:
            session.cancel()

    def _forget(self, session: SamplingSession) -> None:
        self._live.pop(session.session_id, None)
