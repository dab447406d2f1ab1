from typing import Any, Dict, Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every API route."""
    success: bool
    message: str
    data: Optional[T] = None
    error: Optional[str] = None
    details: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with JSON-serializable values, dropping empty keys."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def ok(cls, message: str, data: Optional[T] = None) -> "ApiResponse[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, code: str = "ERROR", details: Optional[Any] = None) -> "ApiResponse[T]":
        return cls(success=False, message=message, error=code, details=details)
