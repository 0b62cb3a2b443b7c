from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fastapi import status

from app.core.constants import ERROR_MESSAGES
from app.core.errors import ErrorKind, STATUS_CODES
from app.schemas.common import ApiResponse, Pagination

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """Outcome of a service operation.

    Business failures (not found, already exists, conflicts) come back as
    values carrying an ``ErrorKind``; services do not raise for them.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None
    kind: ErrorKind | None = None
    pagination: Pagination | None = None

    @classmethod
    def ok(cls, data: T | None = None, message: str | None = None,
           pagination: Pagination | None = None) -> "ServiceResult[T]":
        return cls(success=True, data=data, message=message, pagination=pagination)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str, message: str | None = None) -> "ServiceResult[T]":
        return cls(success=False, error=error, message=message, kind=kind)

    @classmethod
    def internal(cls, exc: BaseException) -> "ServiceResult[T]":
        return cls.fail(
            ErrorKind.INTERNAL,
            ERROR_MESSAGES["INTERNAL_ERROR"],
            str(exc) or "Unknown error occurred"
        )

    def status_code(self, success_status: int = status.HTTP_200_OK) -> int:
        if self.success:
            return success_status
        return STATUS_CODES[self.kind or ErrorKind.INTERNAL]

    def envelope(self) -> ApiResponse[Any]:
        return ApiResponse[Any](
            success=self.success,
            data=self.data,
            error=self.error,
            message=self.message,
            pagination=self.pagination
        )
