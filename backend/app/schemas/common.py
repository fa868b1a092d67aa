from typing import Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for every request/response schema.

    Fields are snake_case in Python and camelCase on the wire; input accepts
    either spelling. from_attributes lets responses be built from ORM rows.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class PaginatedResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str
    data: List[T]
    pagination: Pagination


class ErrorResponse(CamelModel):
    success: bool = False
    message: str
    status_code: int
    errors: Optional[Dict[str, List[str]]] = None


def strip_value_error_prefix(message: str) -> str:
    """pydantic prefixes messages raised from validators with 'Value error, '"""
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message
