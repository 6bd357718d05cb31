"""Translation of query-string parameters into a ParsedListQuery.

``parse_list_query`` never raises for request input: unknown names are
ignored, and invalid sort / order / limit / offset values fall back to the
configured defaults.
"""

import logging
import re
import sys
from typing import Any, List, Optional

from sqlalchemy import and_, asc, desc
from sqlalchemy.sql.elements import ColumnElement
from starlette.datastructures import QueryParams

from listquery.operators import FilterOp, apply_operator
from listquery.params import resolve_params
from listquery.schemas.config import ColumnFilter, ListQueryConfig, SortDirection
from listquery.schemas.query import ParsedListQuery

logger = logging.getLogger(__name__)

# Params consumed by the parser itself, never forwarded to filters.
RESERVED_PARAMS = frozenset({"sort", "order", "limit", "offset"})

# Leading integer, the way parseInt reads it: "12.9" -> 12, "7abc" -> 7.
_LEADING_INT = re.compile(r"\s*([+-]?)([0-9]+)")
_MAX_DIGITS = 18


def parse_int_clamped(raw: Optional[str], minimum: int, maximum: Optional[int], fallback: int) -> int:
    """Parse a leading integer and clamp it to ``[minimum, maximum]``.

    Returns ``fallback`` when ``raw`` is missing, empty or has no leading
    digits. ``maximum=None`` means no upper bound.
    """
    if not raw:
        return fallback
    match = _LEADING_INT.match(raw)
    if match is None:
        return fallback
    sign, digits = match.groups()
    digits = digits.lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        # Out of any useful range; clamp without converting.
        value = -sys.maxsize if sign == "-" else sys.maxsize
    else:
        value = int(sign + digits)
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _column_condition(column_filter: ColumnFilter, raw_value: str) -> ColumnElement:
    parse = column_filter.parse or (lambda v: v)
    if column_filter.op is FilterOp.IN:
        value: Any = [parse(item) for item in raw_value.split(",")]
    else:
        value = parse(raw_value)
    return apply_operator(column_filter.op, column_filter.column, value)


def build_conditions(params: QueryParams, config: ListQueryConfig) -> List[ColumnElement]:
    """Collect one condition per matching, non-empty, non-reserved pair.

    Pairs are visited in their original order; a repeated name yields one
    condition per occurrence.
    """
    conditions: List[ColumnElement] = []

    for name, raw_value in params.multi_items():
        if name in RESERVED_PARAMS or not raw_value:
            continue

        column_filter = config.filters.get(name)
        custom_filter = config.custom_filters.get(name)
        if column_filter is None and custom_filter is None:
            continue

        try:
            if column_filter is not None:
                condition = _column_condition(column_filter, raw_value)
            else:
                condition = custom_filter(raw_value)
        except Exception as e:
            # Caller-supplied callables may raise anything for a malformed value
            # (int("x"), Status["x"], lookup["x"]); only this pair is skipped.
            logger.debug(f"Skipping malformed value for filter {name!r}: {e}")
            continue

        if condition is not None:
            conditions.append(condition)

    return conditions


def parse_list_query(raw: Any, config: ListQueryConfig) -> ParsedListQuery:
    """Parse query parameters into a ParsedListQuery.

    Filters:
        Each non-reserved param is matched against ``config.filters`` and
        then ``config.custom_filters``. Matched conditions are AND-ed;
        unknown params are ignored. ``where`` is None when nothing matched.

    Sorting:
        ``?sort=<key>&order=asc|desc``. A key missing from
        ``config.sortable`` or an order other than asc/desc falls back to
        ``config.default_sort``.

    Pagination:
        ``?limit=<n>&offset=<n>``. Limit is clamped to ``[1, max_limit]``,
        offset to ``>= 0``. Non-numeric values fall back to the defaults.

    Args:
        raw: Request, URL, QueryParams, query string, mapping or pairs
        config: Endpoint configuration

    Returns:
        ParsedListQuery
    """
    default_limit = config.resolved_default_limit
    max_limit = config.resolved_max_limit
    params = resolve_params(raw)

    conditions = build_conditions(params, config)
    where = and_(*conditions) if conditions else None

    # Sorting (invalid key / order -> defaults)
    requested_key = params.get("sort")
    requested_dir = params.get("order")

    if requested_key and requested_key in config.sortable:
        sort_key = requested_key
    else:
        if requested_key:
            logger.debug(f"Ignoring sort key {requested_key!r}; using {config.default_sort.key!r}")
        sort_key = config.default_sort.key

    if requested_dir in (SortDirection.ASC.value, SortDirection.DESC.value):
        sort_dir = SortDirection(requested_dir)
    else:
        sort_dir = config.default_sort.dir

    sort_column = config.sortable[sort_key]
    order_by = asc(sort_column) if sort_dir is SortDirection.ASC else desc(sort_column)

    # Pagination (clamped, never raises)
    limit = parse_int_clamped(params.get("limit"), 1, max_limit, default_limit)
    offset = parse_int_clamped(params.get("offset"), 0, None, 0)

    return ParsedListQuery(
        where=where,
        order_by=order_by,
        limit=limit,
        offset=offset,
        sort_key=sort_key,
        sort_dir=sort_dir,
    )
