"""
Error taxonomy for the siblings loader.

Every error names the pipeline step it belongs to and the process exit code
the command line entry point reports for it.
"""

EXIT_OK = 0
EXIT_INVALID_INPUT = 2
EXIT_FETCH_FAILED = 3
EXIT_LAUNCH_FAILED = 4
EXIT_INTERRUPTED = 130


class LoaderError(Exception):
    """Base class for all loader failures."""

    step = "load"
    exit_code = 1


class InvalidTargetError(LoaderError):
    """Raised when a target or override set cannot be resolved to a location."""

    step = "resolve"
    exit_code = EXIT_INVALID_INPUT


class MissingProjectError(InvalidTargetError):
    """Raised when no project is configured for the resolved location."""


class FetchError(LoaderError):
    """Raised when the sibling file cannot be fetched or reused."""

    step = "fetch"
    exit_code = EXIT_FETCH_FAILED


class ObjectNotFoundError(FetchError):
    """Raised when the bucket or object does not exist."""


class AccessDeniedError(FetchError):
    """Raised on authentication or authorization failures."""


class TransientFetchError(FetchError):
    """Raised once the retry budget for transient failures is exhausted."""


class LocalWriteError(FetchError):
    """Raised when the destination file cannot be written."""


class LocalFileMissingError(FetchError):
    """Raised when reusing a local file that does not exist."""


class LaunchError(LoaderError):
    """Raised when the consumer process cannot be started."""

    step = "launch"
    exit_code = EXIT_LAUNCH_FAILED


class ConsumerExitError(LoaderError):
    """
    Reported when the consumer exits with a non-zero status.

    This is not a failure of the loader itself: the exit code carried here is
    the consumer's own and is passed straight through.
    """

    step = "consumer"

    def __init__(self, returncode):
        super().__init__(f"consumer exited with status {returncode}")
        self.exit_code = returncode
