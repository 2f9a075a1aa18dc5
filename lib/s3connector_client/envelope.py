"""Result envelopes returned by every remote call.

Each call returns one of the variants below instead of raising. Callers can
branch on the variant type, or on ``result.success`` when only the outcome
matters. ``to_dict()`` gives the flat shape used for JSON output.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

REQUEST_FAILED = "Request failed"
DOWNLOAD_FAILED = "Download failed"


@dataclass(frozen=True)
class Success:
    data: Any = None
    message: str | None = None
    status_code: int = 200
    raw_response: Any = None

    success = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "data": self.data,
            "message": self.message,
            "status_code": self.status_code,
            "response": self.raw_response,
        }


@dataclass(frozen=True)
class Failure:
    error: str
    status_code: int = 0
    raw_response: Any = None

    success = False

    @property
    def transport_error(self) -> bool:
        """True when no response was ever received."""
        return self.status_code == 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": False,
            "error": self.error,
            "status_code": self.status_code,
        }
        if self.raw_response is not None:
            out["response"] = self.raw_response
        return out


@dataclass(frozen=True)
class Content:
    data: bytes
    content_type: str | None = None
    content_length: int | None = None
    status_code: int = 200

    success = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "content_type": self.content_type,
            "content_length": self.content_length,
            "status_code": self.status_code,
        }


@dataclass(frozen=True)
class SavedDownload:
    local_path: str
    size: int
    data: Any = None
    message: str | None = None
    status_code: int = 200
    raw_response: Any = None

    success = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "local_path": self.local_path,
            "size": self.size,
            "data": self.data,
            "status_code": self.status_code,
        }


@dataclass(frozen=True)
class PartialFailure:
    """Metadata call succeeded, but the content was not saved locally."""

    error: str
    metadata: Success
    local_path: str
    status_code: int = 0

    success = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": self.error,
            "status_code": self.status_code,
            "local_path": self.local_path,
            "saved": False,
            "data": self.metadata.data,
            "response": self.metadata.raw_response,
        }


Envelope = Union[Success, Failure]
ContentResult = Union[Content, Failure]
DownloadResult = Union[Success, SavedDownload, PartialFailure, Failure]


def classify(status_code: int, body: Any) -> Envelope:
    """Map a received response onto Success/Failure by status code."""
    fields = body if isinstance(body, dict) else {}
    if 200 <= status_code < 300:
        return Success(
            data=fields.get("data"),
            message=fields.get("message"),
            status_code=status_code,
            raw_response=body,
        )
    return Failure(
        error=REQUEST_FAILED if fields.get("message") is None else fields["message"],
        status_code=status_code,
        raw_response=body,
    )
