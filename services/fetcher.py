"""
Object fetcher.

Downloads the sibling file from Cloud Storage into a local path. The object
is written to a temporary file beside the destination, checked against the
size and MD5 Cloud Storage reports, and only then renamed into place, so a
failed or interrupted fetch never leaves a partial destination file behind.
Transient backend failures are retried with exponential backoff.
"""

import logging
import os
import time
from pathlib import Path

from google.api_core import exceptions as api_exceptions
from google.api_core.retry import exponential_sleep_generator
from google.auth.exceptions import RefreshError
from google.cloud.storage.retry import _should_retry

from services.errors import (
    AccessDeniedError,
    FetchError,
    LoaderError,
    LocalFileMissingError,
    LocalWriteError,
    ObjectNotFoundError,
    TransientFetchError,
)
from services.models import FetchResult
from utils.file_utils import create_temp_beside, discard, file_digests

logger = logging.getLogger(__name__)


class IntegrityMismatch(Exception):
    """Downloaded bytes don't match the object's metadata."""


def is_transient(exc):
    """Return True for failures worth another attempt."""
    return isinstance(exc, IntegrityMismatch) or _should_retry(exc)


def _verify(blob, size, md5_b64):
    expected_size = getattr(blob, "size", None)
    if expected_size is not None and size != expected_size:
        raise IntegrityMismatch(f"expected {expected_size} bytes, got {size}")

    # Composite objects carry no MD5, only the size can be checked
    expected_md5 = getattr(blob, "md5_hash", None)
    if expected_md5 and md5_b64 != expected_md5:
        raise IntegrityMismatch(f"MD5 mismatch: expected {expected_md5}, got {md5_b64}")


def _fetch_once(client, location, dest):
    blob = client.bucket(location.bucket).get_blob(location.key)
    if blob is None:
        raise ObjectNotFoundError(f"{location.uri} does not exist")

    try:
        fh, temp_path = create_temp_beside(dest)
    except OSError as e:
        raise LocalWriteError(f"cannot create a file in {dest.parent}: {e}") from e

    try:
        with fh:
            # Stored bytes, so gzip-encoded objects still match their metadata
            blob.download_to_file(fh, checksum=None, raw_download=True)
        try:
            size, md5_hex, md5_b64 = file_digests(temp_path)
        except OSError as e:
            raise LocalWriteError(f"cannot read back {temp_path}: {e}") from e
        _verify(blob, size, md5_b64)
        try:
            os.replace(temp_path, dest)
        except OSError as e:
            raise LocalWriteError(f"cannot write {dest}: {e}") from e
    except BaseException:
        discard(temp_path)
        raise

    return FetchResult(local_path=str(dest), byte_size=size, content_hash=md5_hex)


def fetch(location, dest_path, client=None, retries=None, backoff=None, sleep=time.sleep):
    """
    Fetch an object into dest_path, replacing any existing file atomically.

    Args:
        location: Location of the object.
        dest_path: Local destination path; its directory must exist.
        client: google.cloud.storage.Client. Built from default credentials
            for location.project when omitted.
        retries: Extra attempts allowed for transient failures.
        backoff: Tuple of (initial, maximum, multiplier) delays in seconds.
        sleep: Called with each backoff delay.

    Returns:
        FetchResult describing the written file.

    Raises:
        ObjectNotFoundError: The bucket or object does not exist.
        AccessDeniedError: Credentials are missing or lack permission.
        TransientFetchError: Transient failures outlasted the retry budget.
        LocalWriteError: The destination cannot be written.
    """
    if retries is None or backoff is None:
        from config.settings import get_fetch_settings
        settings = get_fetch_settings()
        if retries is None:
            retries = settings["retries"]
        if backoff is None:
            backoff = (settings["initial"], settings["maximum"], settings["multiplier"])

    dest = Path(dest_path)
    if not dest.parent.is_dir():
        raise LocalWriteError(f"destination directory {dest.parent} does not exist")

    if client is None:
        from data.storage_client import initialize_storage_client
        client = initialize_storage_client(location.project)

    initial, maximum, multiplier = backoff
    delays = exponential_sleep_generator(initial, maximum, multiplier)
    attempts = max(0, retries) + 1

    for attempt in range(1, attempts + 1):
        try:
            result = _fetch_once(client, location, dest)
            logger.info(f"Downloaded {location.uri} -> {dest} ({result.byte_size} bytes)")
            return result
        except LoaderError:
            raise
        except api_exceptions.NotFound as e:
            raise ObjectNotFoundError(f"{location.uri} does not exist") from e
        except (api_exceptions.Forbidden, api_exceptions.Unauthorized, RefreshError) as e:
            raise AccessDeniedError(f"access to {location.uri} denied: {e}") from e
        except Exception as e:
            if not is_transient(e):
                if isinstance(e, api_exceptions.GoogleAPICallError):
                    raise FetchError(f"fetching {location.uri} failed: {e}") from e
                raise
            if attempt == attempts:
                raise TransientFetchError(
                    f"fetching {location.uri} failed after {attempts} attempts: {e}"
                ) from e
            delay = next(delays)
            logger.warning(
                f"Attempt {attempt}/{attempts} for {location.uri} failed: {e}; "
                f"retrying in {delay:.1f}s"
            )
            sleep(delay)


def reuse_local(dest_path):
    """
    Use a previously downloaded file instead of fetching.

    Raises:
        LocalFileMissingError: The file doesn't exist.
    """
    path = Path(dest_path)
    if not path.is_file():
        raise LocalFileMissingError(f"{path} does not exist, cannot skip the fetch")
    size, md5_hex, _ = file_digests(path)
    logger.info(f"Reusing local file {path} ({size} bytes)")
    return FetchResult(local_path=str(path), byte_size=size, content_hash=md5_hex)
