from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from sqlalchemy.sql.elements import ColumnElement

from listquery.exceptions import DefaultSortNotSortable, InvalidLimit, InvalidListQueryConfig
from listquery.operators import FilterOp

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

# Receives the raw query-param value; returns a condition, or None to skip.
CustomFilter = Callable[[str], Optional[ColumnElement]]


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class ColumnFilter:
    """Maps one query-string parameter to a column and an operator.

    ``?status=LISTED`` with ``ColumnFilter(Resource.status)`` becomes
    ``Resource.status == "LISTED"``; ``ColumnFilter(Resource.age, "gte",
    parse=int)`` turns ``?min_age=18`` into ``Resource.age >= 18``.

    ``parse`` coerces the raw string. It runs once per value, or once per
    comma-separated item when ``op`` is ``in``. Defaults to identity.
    """

    column: Any
    op: FilterOp = FilterOp.EQ
    parse: Optional[Callable[[str], Any]] = None

    def __post_init__(self):
        try:
            object.__setattr__(self, "op", FilterOp(self.op))
        except ValueError:
            raise InvalidListQueryConfig(f'unknown filter operator "{self.op}"')
        if self.parse is not None and not callable(self.parse):
            raise InvalidListQueryConfig("filter parse must be callable")


def _column_filter(name: str, entry: Any) -> ColumnFilter:
    """Accept a ColumnFilter or a mapping of its fields ({"column": ..., "op": ...})."""
    if isinstance(entry, ColumnFilter):
        return entry
    if isinstance(entry, Mapping):
        try:
            return ColumnFilter(**entry)
        except TypeError as e:
            raise InvalidListQueryConfig(f'invalid filter "{name}": {e}')
    raise InvalidListQueryConfig(
        f'filter "{name}" must be a ColumnFilter or a mapping, got {type(entry).__name__}'
    )


@dataclass(frozen=True)
class DefaultSort:
    """Sort used when ``sort`` / ``order`` are missing or not allowed."""

    key: str
    dir: SortDirection

    def __post_init__(self):
        try:
            object.__setattr__(self, "dir", SortDirection(self.dir))
        except ValueError:
            raise InvalidListQueryConfig(f'default sort direction must be "asc" or "desc", got "{self.dir}"')


@dataclass(frozen=True, eq=False)
class ListQueryConfig:
    """Declarative, per-endpoint configuration for ``parse_list_query``.

    Every key of ``filters``, ``custom_filters`` and ``sortable`` is an
    allowlist entry; query params that match none of them are ignored.
    Built once at route-definition time and shared across requests.
    """

    filters: Mapping[str, ColumnFilter]
    sortable: Mapping[str, Any]
    default_sort: Union[DefaultSort, Mapping[str, str]]
    custom_filters: Mapping[str, CustomFilter] = field(default_factory=dict)
    default_limit: Optional[int] = None
    max_limit: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.default_sort, Mapping):
            object.__setattr__(self, "default_sort", DefaultSort(**self.default_sort))
        object.__setattr__(
            self,
            "filters",
            {name: _column_filter(name, entry) for name, entry in (self.filters or {}).items()},
        )
        for name, custom_filter in (self.custom_filters or {}).items():
            if not callable(custom_filter):
                raise InvalidListQueryConfig(f'custom filter "{name}" is not callable')
        for name in ("filters", "sortable", "custom_filters"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name) or {})))

        if self.default_sort.key not in self.sortable:
            raise DefaultSortNotSortable(self.default_sort.key)

        for value in (self.max_limit, self.default_limit):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidLimit(f"limits must be positive integers, got {value!r}")
        if self.resolved_default_limit > self.resolved_max_limit:
            raise InvalidLimit(
                f"default_limit ({self.resolved_default_limit}) exceeds max_limit ({self.resolved_max_limit})"
            )

    @property
    def resolved_default_limit(self) -> int:
        if self.default_limit is None:
            # A small max_limit without an explicit default caps the default too.
            return min(DEFAULT_LIMIT, self.resolved_max_limit)
        return self.default_limit

    @property
    def resolved_max_limit(self) -> int:
        return MAX_LIMIT if self.max_limit is None else self.max_limit
