"""Shared fixtures: a fake Cloud Storage client serving in-memory objects."""

import base64
import hashlib
from unittest.mock import MagicMock

import pytest


class FakeBlob:
    """Stands in for google.cloud.storage.Blob with pre-populated metadata."""

    def __init__(self, data, failures=None, md5_hash="auto", size="auto", decoded=None):
        self.data = data
        # Bytes served when the client asks for transcoding, e.g. gunzipped content
        self.decoded = decoded
        self.raw_download = None
        self.size = len(data) if size == "auto" else size
        if md5_hash == "auto":
            md5_hash = base64.b64encode(hashlib.md5(data).digest()).decode("ascii")
        self.md5_hash = md5_hash
        self.failures = list(failures or [])
        self.download_calls = 0

    def download_to_file(self, file_obj, checksum="md5", raw_download=False):
        self.download_calls += 1
        self.raw_download = raw_download
        if self.failures:
            failure = self.failures.pop(0)
            if isinstance(failure, bytes):
                file_obj.write(failure)
                return
            # Simulate a connection dropping mid-stream
            file_obj.write(self.data[: len(self.data) // 2])
            raise failure
        if self.decoded is not None and not raw_download:
            file_obj.write(self.decoded)
        else:
            file_obj.write(self.data)


def make_client(objects, get_blob_errors=None):
    """
    Build a mock storage client.

    Args:
        objects: Mapping of (bucket, key) to FakeBlob.
        get_blob_errors: Exceptions raised by successive get_blob calls before
            normal lookups resume.
    """
    errors = list(get_blob_errors or [])
    client = MagicMock()
    client.get_blob_calls = 0

    def bucket(bucket_name):
        mock_bucket = MagicMock()

        def get_blob(key):
            client.get_blob_calls += 1
            if errors:
                raise errors.pop(0)
            return objects.get((bucket_name, key))

        mock_bucket.get_blob.side_effect = get_blob
        return mock_bucket

    client.bucket.side_effect = bucket
    return client


def temp_artifacts(dest):
    """Leftover temporary download files for a destination."""
    return sorted(dest.parent.glob(f".{dest.name}.*.tmp"))


@pytest.fixture
def payload():
    return b'{"august": {"default": "https://august.example"}}'.ljust(200, b" ")


@pytest.fixture
def no_sleep():
    delays = []
    return delays, delays.append
