# Response envelope and pagination schemas

from math import ceil
from typing import Any, Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Pagination(BaseModel):
    """Pagination block attached to list responses"""

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit) if limit else 0)


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every endpoint"""

    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None
    pagination: Pagination | None = None


def envelope_dict(response: ApiResponse[Any]) -> dict[str, Any]:
    """JSON body with unset top-level keys left out"""
    body = response.model_dump(mode="json", by_alias=True)
    return {key: value for key, value in body.items() if value is not None}
