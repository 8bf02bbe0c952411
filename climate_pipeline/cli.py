"""
climate_pipeline/cli.py

Command-line entry points for the update and verify passes.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Sequence

from climate_pipeline.config import get_pipeline_settings
from climate_pipeline.errors import CliUsageError, IncompleteDatasetError
from climate_pipeline.logging_utils import configure_logging
from climate_pipeline.scheduler.jobs import build_scheduler, run_update_job
from climate_pipeline.schemas.artifact import DatasetArtifactModel
from climate_pipeline.services.update_service import ClimateUpdateService, get_update_service
from climate_pipeline.services.verification_service import DatasetVerifier

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 360.0

UPDATE_HELP = """Usage: climate-update [--watch] [--interval-minutes=<n>]

Fetch every climate feed, validate the series and write the dataset file.

Options:
  --watch                 Keep running and refresh on a fixed interval.
  --interval-minutes=<n>  Minutes between refreshes in watch mode (default 360).
  -h, --help              Show this help and exit.
"""

VERIFY_HELP = """Usage: climate-verify

Check the persisted dataset file for shape, ordering, range, freshness and
cross-series consistency. Exits non-zero when any error is found.
"""


class _RaisingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise CliUsageError(message)


@dataclass(frozen=True)
class UpdateOptions:
    watch: bool = False
    interval_minutes: float = DEFAULT_INTERVAL_MINUTES
    show_help: bool = False


def _positive_minutes(raw_value: str) -> float:
    try:
        minutes = float(raw_value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid --interval-minutes value: {raw_value!r}") from None
    if not minutes >= 1 or minutes == float("inf"):
        raise argparse.ArgumentTypeError(
            f"--interval-minutes must be a number >= 1 (got {raw_value!r})"
        )
    return minutes


def parse_update_options(argv: Sequence[str] | None = None, *, default_interval: float | None = None) -> UpdateOptions:
    """
    Parse update flags.

    Raises:
        CliUsageError: for unknown flags or an invalid interval.
    """

    parser = _RaisingArgumentParser(prog="climate-update", add_help=False, allow_abbrev=False)
    parser.add_argument("--watch", action="store_true")
    parser.add_argument(
        "--interval-minutes",
        dest="interval_minutes",
        type=_positive_minutes,
        default=default_interval if default_interval is not None else DEFAULT_INTERVAL_MINUTES,
    )
    parser.add_argument("-h", "--help", dest="show_help", action="store_true")
    args = parser.parse_args(list(argv) if argv is not None else None)
    return UpdateOptions(
        watch=args.watch,
        interval_minutes=args.interval_minutes,
        show_help=args.show_help,
    )


def _run_once(service: ClimateUpdateService) -> int:
    try:
        result = service.run()
    except IncompleteDatasetError as exc:
        print("Refusing to write an incomplete dataset. Empty series:", file=sys.stderr)
        for key in exc.empty_series:
            print(f"- {key}", file=sys.stderr)
        return 1
    except Exception as exc:  # noqa: BLE001
        logger.exception("Update failed: %s", exc)
        print(f"Update failed: {exc}", file=sys.stderr)
        return 1

    summary = DatasetArtifactModel.from_domain(result.artifact).model_dump(by_alias=True, mode="json")["summary"]
    print(json.dumps(summary, indent=2))
    if result.map_warnings:
        print("Map warnings:", file=sys.stderr)
        for warning in result.map_warnings:
            print(f"- {warning}", file=sys.stderr)
    return 0


def update_main(argv: Sequence[str] | None = None, *, service: ClimateUpdateService | None = None) -> int:
    configure_logging()
    try:
        options = parse_update_options(
            argv,
            default_interval=get_pipeline_settings().default_interval_minutes,
        )
    except CliUsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(UPDATE_HELP, file=sys.stderr)
        return 1

    if options.show_help:
        print(UPDATE_HELP)
        return 0

    update_service = service or get_update_service()
    if not options.watch:
        return _run_once(update_service)

    logger.info("Watch mode enabled interval_minutes=%s", options.interval_minutes)
    scheduler = build_scheduler(partial(run_update_job, update_service), options.interval_minutes)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Watch mode stopped")
    return 0


def verify_main(argv: Sequence[str] | None = None, *, path: str | Path | None = None) -> int:
    configure_logging()
    parser = _RaisingArgumentParser(prog="climate-verify", add_help=False, allow_abbrev=False)
    parser.add_argument("-h", "--help", dest="show_help", action="store_true")
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except CliUsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.show_help:
        print(VERIFY_HELP)
        return 0

    target = Path(path) if path is not None else Path(get_pipeline_settings().output_path)
    verifier = DatasetVerifier()
    try:
        report = verifier.verify_file(target)
    except (OSError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if report.warnings:
        print("Data verification warnings:", file=sys.stderr)
        for warning in report.warnings:
            print(f"- {warning}", file=sys.stderr)

    if report.errors:
        print("Data verification failed:", file=sys.stderr)
        for error in report.errors:
            print(f"- {error}", file=sys.stderr)
        return 1

    print(f"Data verification passed ({report.checked_series} series checked).")
    return 0
