"""
Shared response envelope and pagination schemas
"""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class ApiResponse(CamelModel):
    """Success envelope returned by every endpoint."""

    status_code: int = 200
    data: Any = None
    message: str = "Success"
    success: bool = True


class ErrorResponse(CamelModel):
    """Error envelope produced by the exception handlers."""

    status_code: int
    message: str
    success: bool = False
    errors: List[Any] = Field(default_factory=list)


class Pagination(BaseModel):
    """Offset pagination request."""

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageInfo(CamelModel):
    """Pagination metadata computed from the total match count."""

    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool
