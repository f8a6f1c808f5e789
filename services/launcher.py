"""
Process launcher for the sibling file consumer.

The consumer inherits this process's stdout and stderr, so its output shows
up live and is never buffered here.
"""

import logging
import os
import shlex
import signal
import subprocess

from services.errors import LaunchError
from services.models import LaunchSpec

logger = logging.getLogger(__name__)


def build_launch_spec(command, fetch_result, location, target, log_level="info", working_dir=None):
    """
    Build the launch spec for the consumer.

    Args:
        command: Consumer command line, split with shell rules.
        fetch_result: FetchResult for the sibling file.
        location: Resolved Location.
        target: Normalised target name, exported as X_ENV.
        log_level: Verbosity exported as RUST_LOG.
        working_dir: Directory to run the consumer in.

    Returns:
        LaunchSpec ready for launch().
    """
    argv = shlex.split(command or "")
    if not argv:
        raise LaunchError("no consumer command configured")

    env = {
        "X_PROJECT": location.project,
        "X_ENV": target,
        "RUST_LOG": log_level,
        "X_SIBLINGS_FILE": os.path.abspath(fetch_result.local_path),
    }
    return LaunchSpec(
        executable=argv[0],
        args=tuple(argv[1:]),
        env=env,
        working_dir=working_dir,
    )


def _exit_status(returncode):
    # Killed by a signal: report it the way a shell does
    if returncode < 0:
        return 128 - returncode
    return returncode


def launch(spec):
    """
    Run the consumer and wait for it to finish.

    Returns:
        The consumer's exit status.

    Raises:
        LaunchError: The executable or working directory is unusable.
    """
    env = os.environ.copy()
    env.update(spec.env)

    try:
        proc = subprocess.Popen(spec.argv, cwd=spec.working_dir, env=env)
    except OSError as e:
        raise LaunchError(f"cannot start {spec.executable}: {e}") from e

    logger.info(f"Started {' '.join(spec.argv)} (pid {proc.pid})")

    try:
        returncode = proc.wait()
    except KeyboardInterrupt:
        logger.warning(f"Interrupted, forwarding SIGINT to pid {proc.pid}")
        try:
            proc.send_signal(signal.SIGINT)
        except ProcessLookupError:
            pass
        proc.wait()
        raise

    status = _exit_status(returncode)
    logger.info(f"{spec.executable} exited with status {status}")
    return status
