from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_FOUND = "not_found"


class StoreError(BaseModel):
    """Error half of a backend result pair."""
    message: str = Field(description="Backend error message, surfaced verbatim")
    code: Optional[str] = Field(default=None, description="Backend error code (PostgreSQL SQLSTATE where applicable)")


class StoreResponse(BaseModel):
    """Result/error pair returned by every backend call."""
    data: Any = Field(default=None, description="Returned row(s) on success")
    error: Optional[StoreError] = Field(default=None, description="Set when the call failed")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any = None) -> "StoreResponse":
        return cls(data=data)

    @classmethod
    def failure(cls, message: str, code: Optional[str] = None) -> "StoreResponse":
        return cls(error=StoreError(message=message, code=code))
