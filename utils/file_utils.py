"""
Local file helpers for the fetcher.

Downloads land in a temporary file next to the destination and are renamed
into place only once complete, so readers never see a partial file.
"""

import base64
import hashlib
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def create_temp_beside(dest_path):
    """
    Create an empty temporary file in the destination's directory.

    Args:
        dest_path: Final destination path.

    Returns:
        Tuple of (open binary file object, temporary path).
    """
    dest = Path(dest_path)
    fd, temp_path = tempfile.mkstemp(
        dir=dest.parent,
        prefix=f".{dest.name}.",
        suffix=".tmp",
    )
    return os.fdopen(fd, "wb"), Path(temp_path)


def discard(path):
    """Remove a temporary file if it is still there."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {path}: {e}")


def file_digests(path):
    """
    Hash a file in chunks.

    Returns:
        Tuple of (size in bytes, hex MD5, base64 MD5). The base64 form is the
        one Cloud Storage reports in object metadata.
    """
    md5 = hashlib.md5()
    size = 0
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            md5.update(chunk)
            size += len(chunk)
    return size, md5.hexdigest(), base64.b64encode(md5.digest()).decode("ascii")

