"""Failures the station service can report to its callers."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    invalid_request = "invalid_request"
    upstream_unreachable = "upstream_unreachable"
    upstream_error = "upstream_error"
    upstream_invalid_response = "upstream_invalid_response"
    unexpected = "unexpected"


class StationDataError(Exception):
    """Base of the closed family of errors raised by ``SensorDataService``.

    Each subclass fixes ``kind`` and ``code``; ``status`` is the HTTP status
    the proxy route answers with.
    """

    kind: ErrorKind = ErrorKind.unexpected
    code: str = "api_error"
    status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"code": self.code, "message": self.message, "data": {"status": self.status}}


class InvalidRequest(StationDataError):
    kind = ErrorKind.invalid_request
    code = "missing_id"
    status = 400

    def __init__(self, message: str = "Box ID is required", code: Optional[str] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class UpstreamUnreachable(StationDataError):
    kind = ErrorKind.upstream_unreachable

    def __init__(self, message: str = "Error connecting to OpenSenseMap API") -> None:
        super().__init__(message)


class UpstreamError(StationDataError):
    kind = ErrorKind.upstream_error

    def __init__(self, status: int) -> None:
        super().__init__(f"Error fetching data from OpenSenseMap API: {status}")
        self.upstream_status = status
        # Non-error upstream codes (2xx, 3xx) must not reach the caller as success.
        self.status = status if status >= 400 else 500

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["data"] = {"status": self.upstream_status}
        return payload


class UpstreamInvalidResponse(StationDataError):
    kind = ErrorKind.upstream_invalid_response

    def __init__(self, message: str = "Invalid response from OpenSenseMap API") -> None:
        super().__init__(message)


class UnexpectedError(StationDataError):
    kind = ErrorKind.unexpected

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(message)
