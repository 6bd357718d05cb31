from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar

from sqlalchemy.sql.elements import ColumnElement

from listquery.schemas.config import SortDirection

T = TypeVar("T")


@dataclass(frozen=True, eq=False)
class ParsedListQuery:
    """Result of ``parse_list_query``, ready for a ``select()`` chain.

    ``where`` is None when no filter matched, so it can always be AND-ed
    with an authorization condition without dropping it.
    """

    where: Optional[ColumnElement]
    order_by: Any
    limit: int
    offset: int
    sort_key: str
    sort_dir: SortDirection

    def apply(self, statement):
        """Apply where / order by / limit / offset to a Select."""
        if self.where is not None:
            statement = statement.where(self.where)
        return statement.order_by(self.order_by).limit(self.limit).offset(self.offset)


@dataclass(frozen=True)
class ListQueryResult(Generic[T]):
    """Rows plus pagination metadata returned by ``run_list_query``."""

    rows: List[T]
    total: int
    has_more: bool
