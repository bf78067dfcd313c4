"""Uniform error envelope returned by every failing request."""

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    status: int
    error: str
    message: str
    timestamp: datetime = Field(default_factory=_utcnow)
    details: Optional[dict[str, Any]] = None

    @classmethod
    def for_status(cls, status_code: int, message: str, details: Optional[dict[str, Any]] = None) -> "ErrorResponse":
        try:
            phrase = HTTPStatus(status_code).phrase
        except ValueError:
            phrase = "Error"
        return cls(status=status_code, error=phrase, message=message, details=details)

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
