"""Exceptions raised by the concert-dl pipeline.

Every stage fails fast: nothing here is caught and retried inside the
pipeline. The CLI reports the message and exits with status 1.
"""

from typing import Optional


class ConcertDLError(Exception):
    """Base exception for all concert-dl errors."""


class VersionError(ConcertDLError):
    """Raised when running on an unsupported Python interpreter."""


class CleanupDeclined(ConcertDLError):
    """Raised when the user refuses to clear leftovers from a previous run."""


class CleanupError(ConcertDLError):
    """Raised when a temporary file cannot be deleted."""


class FetchError(ConcertDLError):
    """Raised when a GET request fails or returns an unusable response."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class ParseError(ConcertDLError):
    """Raised when the homepage does not contain an audio source URL."""


class ManifestError(ConcertDLError):
    """Raised when the pointer file or playlist is missing or malformed."""


class DownloadError(ConcertDLError):
    """Raised when a chunk or manifest file cannot be saved."""

    def __init__(
        self,
        url: str,
        reason: str,
        index: Optional[int] = None,
        total: Optional[int] = None,
    ):
        self.url = url
        self.reason = reason
        self.index = index
        self.total = total
        if index is not None:
            message = f"Chunk {index}/{total} failed ({url}): {reason}"
        else:
            message = f"Failed to save {url}: {reason}"
        super().__init__(message)


class ToolNotFoundError(ConcertDLError):
    """Raised when no usable transcoder binary can be located."""


class InvocationError(ConcertDLError):
    """Raised when a transcoder run is rejected before it starts."""


class TranscodeError(ConcertDLError):
    """Raised when the transcoder exits with a non-zero status."""

    def __init__(self, mode: str, returncode: int, stderr: str = ""):
        self.mode = mode
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"ffmpeg {mode} step failed with exit code {returncode}")
