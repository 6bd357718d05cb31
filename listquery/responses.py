from typing import List, TypeVar

from listquery.schemas.responses import ItemResponseEnvelope, ListResponseEnvelope, ListResponseMeta

T = TypeVar("T")


def list_response(data: List[T], total: int, limit: int, offset: int) -> ListResponseEnvelope[T]:
    """Wrap a page of results in a list envelope with pagination metadata.

    ``has_more`` is True when rows exist beyond ``offset + len(data)``.

    Args:
        data: Rows of the current page
        total: Total number of matching rows
        limit: Page size that was requested
        offset: Offset of the first row

    Returns:
        ``{"data": [...], "meta": {"total", "limit", "offset", "has_more"}}``
    """
    return ListResponseEnvelope(
        data=list(data),
        meta=ListResponseMeta(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(data) < total,
        ),
    )


def item_response(data: T) -> ItemResponseEnvelope[T]:
    """Wrap a single item in a ``{"data": ...}`` envelope."""
    return ItemResponseEnvelope(data=data)
