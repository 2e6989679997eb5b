"""
Command-line interface for treemonitor.

Runs a command, samples its process tree at a fixed interval and prints one
usage line per process when the run ends.
"""

import argparse
import logging
import sys
import tomllib
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..models.results import StopReason
from ..monitoring.report import format_report
from ..orchestration import MonitorRunner
from ..validation import (
    ValidationError,
    handle_cli_error,
    validate_duration,
    validate_path_exists,
    validate_positive_float,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

# Exit status per stop reason; the workload's own exit status is not relayed.
EXIT_CODES = {
    StopReason.DURATION_ELAPSED: 0,
    StopReason.WORKLOAD_EXITED: 0,
    StopReason.SYSTEM_SOURCE_FAILED: 1,
    StopReason.CANCELLED: 130,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treemonitor",
        description="Run a command and report the CPU and memory usage of its process tree.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="Path to config.toml (defaults to conf/config.toml).",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=str,
        help="How long to monitor, e.g. '10s', '1m30s' or a number of seconds.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=str,
        help="Seconds between samples (1 to 60).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log the usage of every process at every tick.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        help="Directory for this run's files instead of a new run_<timestamp> directory.",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Only print the report, do not write any files.",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="The command to run and monitor, with its arguments.",
    )
    return parser


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Raises:
        SystemExit: Always, with 0 after a full or workload-ended run, 130 when
            interrupted, and 1 on configuration, launch or system source errors.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    command = args.command
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        parser.print_usage(sys.stderr)
        logger.error("No command given to monitor")
        sys.exit(1)

    # Load application configuration
    try:
        if args.config:
            set_config_path(Path(validate_path_exists(args.config, field_name="--config")))
        app_config = get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    monitor_config = app_config.monitor

    # Command-line overrides
    try:
        overrides = {}
        if args.duration is not None:
            overrides["duration_seconds"] = validate_duration(
                args.duration, min_seconds=0.0, field_name="--duration"
            )
        if args.interval is not None:
            overrides["interval_seconds"] = validate_positive_float(
                args.interval, min_value=1.0, max_value=60.0, field_name="--interval"
            )
        if args.verbose:
            overrides["verbose"] = True
        if args.no_save:
            overrides["save_results"] = False
        monitor_config = replace(monitor_config, **overrides)
    except ValidationError as e:
        handle_cli_error(
            error=e,
            context="argument validation",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    try:
        runner = MonitorRunner(command, monitor_config, output_dir=args.output_dir)
        results = runner.run()
    except (OSError, ValidationError) as e:
        handle_cli_error(
            error=e,
            context=f"running '{' '.join(command)}'",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    print(format_report(results))
    if runner.output_dir is not None and monitor_config.save_results:
        logger.info(f"Run output saved in: {runner.output_dir}")

    sys.exit(EXIT_CODES.get(results.stop_reason, 1))


if __name__ == "__main__":
    main_cli()
