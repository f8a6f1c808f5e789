import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()
PROJECT_ID = os.environ.get("X_PROJECT") or os.environ.get("PROJECT_ID")
SIBLINGS_BUCKET = os.environ.get("SIBLINGS_BUCKET", "xai-cfg")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Consumer process started once the sibling file is in place
CONSUMER_COMMAND = os.environ.get(
    "SIBLINGS_CONSUMER_COMMAND",
    "cargo run --bin siblings-cli --release -- --nocapture",
)
CONSUMER_LOG = os.environ.get("SIBLINGS_CONSUMER_LOG", "info")

# Built-in targets: name -> (bucket, key)
DEFAULT_TARGETS = {
    "prod": (SIBLINGS_BUCKET, "siblings.json"),
    "dev": (SIBLINGS_BUCKET, "siblings-dev.json"),
}


def _env_number(name, default, cast):
    """Read a numeric setting, rejecting values that don't parse."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def get_fetch_settings():
    """
    Retry and backoff settings for the object fetcher.

    Returns:
        dict with "retries", "initial", "maximum" and "multiplier" keys.
    """
    return {
        "retries": _env_number("SIBLINGS_FETCH_RETRIES", 4, int),
        "initial": _env_number("SIBLINGS_BACKOFF_INITIAL", 0.5, float),
        "maximum": _env_number("SIBLINGS_BACKOFF_MAX", 8.0, float),
        "multiplier": _env_number("SIBLINGS_BACKOFF_MULTIPLIER", 2.0, float),
    }


def parse_extra_targets(raw):
    """
    Parse extra targets of the form "name=bucket/key,other=bucket/key".

    Args:
        raw: The raw setting value, may be empty or None.

    Returns:
        dict mapping lower-cased target name to a (bucket, key) tuple.
    """
    targets = {}
    if not raw:
        return targets

    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, location = entry.partition("=")
        bucket, slash, key = location.strip().partition("/")
        if not sep or not slash or not name.strip() or not bucket or not key:
            raise ValueError(f"Invalid SIBLINGS_EXTRA_TARGETS entry: {entry!r}")
        targets[name.strip().lower()] = (bucket, key)

    return targets


def get_targets():
    """Return the target table: built-in targets plus any configured extras."""
    targets = dict(DEFAULT_TARGETS)
    targets.update(parse_extra_targets(os.environ.get("SIBLINGS_EXTRA_TARGETS")))
    return targets


def setup_logging(level=None):
    """Configure root logging for the command line entry point"""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
