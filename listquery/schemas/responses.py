from typing import Generic, List, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ListResponseMeta(BaseModel):
    """Pagination metadata included in list responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


class ListResponseEnvelope(BaseModel, Generic[T]):
    """Standard envelope for paginated list endpoints."""

    data: List[T]
    meta: ListResponseMeta


class ItemResponseEnvelope(BaseModel, Generic[T]):
    """Standard envelope for single-item endpoints."""

    data: T
