"""
Command line entry point: resolve the target, fetch its sibling file, then
hand the file to the consumer.

Steps run strictly in order and any failure ends the run with a single
diagnostic line on stderr and the exit code of the failed step. When the
consumer runs, its exit status becomes the loader's exit status.
"""

import argparse
import logging
import os
import signal
import sys
import threading

import config.settings as settings
from services.errors import (
    EXIT_FETCH_FAILED,
    EXIT_INTERRUPTED,
    EXIT_INVALID_INPUT,
    EXIT_LAUNCH_FAILED,
    EXIT_OK,
    ConsumerExitError,
    LoaderError,
)
from services.fetcher import fetch, reuse_local
from services.launcher import build_launch_spec, launch
from services.models import Overrides
from services.resolver import normalize_target, resolve

logger = logging.getLogger(__name__)

STEP_EXIT_CODES = {
    "resolve": EXIT_INVALID_INPUT,
    "fetch": EXIT_FETCH_FAILED,
    "launch": EXIT_LAUNCH_FAILED,
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog="load_siblings",
        description="Fetch the siblings file for a target and run its consumer.",
    )
    parser.add_argument("target", help="Target environment, e.g. prod or dev")
    parser.add_argument("--project", help="Project override (requires --bucket and --key)")
    parser.add_argument("--bucket", help="Bucket override (requires --project and --key)")
    parser.add_argument("--key", help="Object key override (requires --project and --bucket)")
    parser.add_argument(
        "--dest",
        help="Local destination path (default: the object's file name in --workdir or the current directory)",
    )
    parser.add_argument(
        "--skip-fetch",
        action="store_true",
        help="Use the existing local file instead of downloading it",
    )
    parser.add_argument("--command", help="Consumer command line (default: SIBLINGS_CONSUMER_COMMAND)")
    parser.add_argument("--workdir", help="Working directory for the consumer")
    parser.add_argument("--retries", type=int, help="Retries for transient fetch failures")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    return parser


def parse_args(argv=None):
    """Parse arguments; exits with status 2 on invalid input."""
    parser = build_parser()
    args = parser.parse_args(argv)

    given = [args.project, args.bucket, args.key]
    if any(given) and not all(given):
        parser.error("--project, --bucket and --key must be given together")
    if args.retries is not None and args.retries < 0:
        parser.error("--retries must not be negative")
    if args.log_level and not isinstance(logging.getLevelName(args.log_level.upper()), int):
        parser.error(f"unknown log level {args.log_level!r}")

    return args


def _report(step, error, exit_code):
    logger.debug(f"{step} step failed", exc_info=error)
    print(f"ERROR: {step} failed: {error}", file=sys.stderr)
    return exit_code


def run(args, client=None):
    """
    Run the resolve, fetch and launch steps for parsed arguments.

    Args:
        args: Namespace from parse_args().
        client: Optional storage client, mainly for tests.

    Returns:
        Process exit code.
    """
    step = "resolve"
    try:
        overrides = Overrides(args.project, args.bucket, args.key)
        location = resolve(
            args.target,
            overrides,
            targets=settings.get_targets(),
            default_project=settings.PROJECT_ID,
        )
        fetch_settings = settings.get_fetch_settings()
        target = normalize_target(args.target)
        # The consumer opens the file relative to its own working directory
        dest = args.dest or os.path.join(args.workdir or "", os.path.basename(location.key))
        logger.info(f"loading siblings to {target} from {location.uri}")

        step = "fetch"
        if args.skip_fetch:
            result = reuse_local(dest)
        else:
            retries = args.retries if args.retries is not None else fetch_settings["retries"]
            backoff = (
                fetch_settings["initial"],
                fetch_settings["maximum"],
                fetch_settings["multiplier"],
            )
            result = fetch(location, dest, client=client, retries=retries, backoff=backoff)

        step = "launch"
        spec = build_launch_spec(
            args.command or settings.CONSUMER_COMMAND,
            result,
            location,
            target,
            log_level=settings.CONSUMER_LOG,
            working_dir=args.workdir,
        )
        status = launch(spec)
    except LoaderError as e:
        return _report(e.step, e, e.exit_code)
    except Exception as e:
        return _report(step, e, STEP_EXIT_CODES[step])

    if status != EXIT_OK:
        logger.warning(str(ConsumerExitError(status)))
    return status


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt(f"received signal {signum}")


def main(argv=None, client=None):
    """Entry point for the load_siblings command."""
    args = parse_args(argv)
    settings.setup_logging(args.log_level)

    previous = None
    if threading.current_thread() is threading.main_thread():
        previous = signal.signal(signal.SIGTERM, _raise_interrupt)

    try:
        return run(args, client=client)
    except KeyboardInterrupt:
        print("ERROR: interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    finally:
        if previous is not None:
            signal.signal(signal.SIGTERM, previous)
