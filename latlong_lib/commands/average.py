# -*- coding: utf-8 -*-
"""Average command: run an accurate-position sampling session.

Only the demo location source is available from the command line: it
replays a fixture track, one fix every 800 ms.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from latlong_lib.errors import LatLongError
from latlong_lib.estimator import format_samples_note
from latlong_lib.location import FixtureLocationProvider
from latlong_lib.scheduling import AsyncioScheduler
from latlong_lib.session import SamplingSessionController
from latlong_lib.session import SessionCallbacks
from latlong_lib.session import SessionConfig
from latlong_lib.session import SessionProgress
from latlong_lib.session import SessionResult
from latlong_lib.settings import load_settings
from latlong_lib.settings import parse_seconds

logger = logging.getLogger(__name__)


async def run_demo_session(config: SessionConfig) -> SessionResult:
    """Run one session on the fixture provider and wait for its outcome.

    Raises:
        PositionUnavailableError: If no fix was accepted
        ProviderError: If the provider failed
    """
    loop = asyncio.get_running_loop()
    outcome: asyncio.Future[SessionResult] = loop.create_future()
    scheduler = AsyncioScheduler(loop)
    controller = SamplingSessionController(scheduler, FixtureLocationProvider(scheduler))

    def _on_progress(progress: SessionProgress) -> None:
        logger.info(
            "%s: %.0f s left, %d accepted, %d discarded",
            progress.phase.value,
            progress.remaining_ms / 1000,
            progress.samples_accepted,
            progress.samples_discarded,
        )

    session = controller.start(
        config,
        SessionCallbacks(
            on_progress=_on_progress,
            on_success=outcome.set_result,
            on_error=outcome.set_exception,
        ),
    )
    try:
        return await outcome
    finally:
        controller.cancel(session)


def average(args: list[str]) -> int:
    """Entry point for the average command."""
    parser = argparse.ArgumentParser(
        prog="latlong average",
        description="Compute an accurate position by averaging location fixes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  latlong average --demo
  latlong average --demo --warmup 2 --duration 10
  latlong average --demo -e settings.env
""",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the demo location source (fixture track)",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=None,
        help="Warm-up duration in seconds (default: from settings)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=None,
        help="Collection duration in seconds (default: from settings)",
    )
    parser.add_argument(
        "-e",
        "--env_file",
        type=Path,
        default=None,
        help="Optional environment file with LATLONG_* settings",
    )

    parsed_args = parser.parse_args(args)
    if not parsed_args.demo:
        parser.error(
            "no live location source is available from the command line, "
            "use --demo to replay the demo track"
        )

    settings = load_settings(parsed_args.env_file)
    update = {}
    if parsed_args.warmup is not None:
        update["warmup_seconds"] = parse_seconds(
            str(parsed_args.warmup), settings.warmup_seconds
        )
    if parsed_args.duration is not None:
        update["averaging_duration_seconds"] = parse_seconds(
            str(parsed_args.duration), settings.averaging_duration_seconds
        )

    settings = settings.model_copy(update=update)

    try:
        result = asyncio.run(run_demo_session(settings.to_session_config()))
    except LatLongError as e:
        logger.error("Averaging failed: %s", e)  # noqa: TRY400
        return 1

    print(f"{result.longitude} {result.latitude}")  # noqa: T201
    print(  # noqa: T201
        f"{result.samples_used} samples used, {result.samples_discarded} discarded"
    )
    print(format_samples_note(result.samples))  # noqa: T201
    return 0
