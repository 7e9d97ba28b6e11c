"""
Uniform response envelope.

All endpoints answer with the same shape, success or failure.
"""

from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiResult(BaseModel, Generic[T]):
    """Response envelope: ``{success, data, message, errors, statusCode, timestamp}``."""
    success: bool
    data: Optional[T] = None
    message: str
    errors: Optional[List[str]] = None
    status_code: int = Field(200, alias="statusCode")
    timestamp: datetime = Field(default_factory=_utcnow)

    class Config:
        populate_by_name = True

    @classmethod
    def success_result(
        cls,
        data: Optional[T] = None,
        message: str = "Operation completed successfully",
        status_code: int = 200
    ) -> "ApiResult[T]":
        return cls(success=True, data=data, message=message, status_code=status_code)

    @classmethod
    def error(
        cls,
        message: str = "Operation failed",
        errors: Optional[List[str]] = None,
        status_code: int = 400
    ) -> "ApiResult[T]":
        return cls(success=False, message=message, errors=errors or [message], status_code=status_code)
