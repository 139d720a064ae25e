"""Error hierarchy for upstream fetching and archive re-packaging.

Every failure on the fetch → decode → extract and fetch → transform paths
is an ``UpstreamError``. The HTTP layer maps the whole family to a 500
response whose body is the error text, so messages are written to be read
by a client:

    UpstreamError
    ├── TransportFailure   connection / protocol / status errors
    ├── ReadFailure        response body (or archive entry) could not be read
    ├── DecodeFailure      bytes are not a readable zip archive
    ├── WriteFailure       re-encoding the archive failed
    ├── FetchFailure       RuntimeCache / BundleService fetch boundary
    └── TransformFailure   BundleService transform boundary
"""

from typing import Optional


class UpstreamError(Exception):
    """Base class for upstream failures.

    Carries the failing ``stage`` and the original error for logging.
    """

    stage: str = "upstream"

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        stage: Optional[str] = None,
    ):
        if stage is not None:
            self.stage = stage
        self.message = message
        self.cause = cause
        super().__init__(f"[{self.stage}] {message}")


class TransportFailure(UpstreamError):
    """Raised when the upstream host cannot be reached or rejects the request."""

    stage = "transport"

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(message, cause)


class ReadFailure(UpstreamError):
    stage = "read"


class DecodeFailure(UpstreamError):
    stage = "decode"


class WriteFailure(UpstreamError):
    stage = "write"


# Fetcher/archive stages as reported at the cache boundary.
_FETCH_STAGES: dict[str, str] = {
    "transport": "network",
    "read": "read",
    "decode": "decode",
}


class FetchFailure(UpstreamError):
    """Raised when a runtime or bundle could not be fetched and decoded.

    ``stage`` is one of ``network``, ``read`` or ``decode``.
    """

    @classmethod
    def wrap(cls, exc: UpstreamError) -> "FetchFailure":
        return cls(exc.message, cause=exc, stage=_FETCH_STAGES.get(exc.stage, exc.stage))


class TransformFailure(UpstreamError):
    """Raised when a fetched source bundle could not be re-packaged."""

    @classmethod
    def wrap(cls, exc: UpstreamError) -> "TransformFailure":
        return cls(exc.message, cause=exc, stage=exc.stage)
