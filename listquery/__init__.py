"""Allowlisted query-string filtering, sorting and pagination for SQLAlchemy."""

from listquery.dependencies import ListQueryParams
from listquery.exceptions import DefaultSortNotSortable, InvalidLimit, InvalidListQueryConfig, ListQueryError
from listquery.operators import FilterOp, apply_operator
from listquery.params import InputKind, classify_input, resolve_params
from listquery.parser import parse_list_query
from listquery.responses import item_response, list_response
from listquery.schemas.config import ColumnFilter, CustomFilter, DefaultSort, ListQueryConfig, SortDirection
from listquery.schemas.query import ListQueryResult, ParsedListQuery
from listquery.schemas.responses import ItemResponseEnvelope, ListResponseEnvelope, ListResponseMeta
from listquery.services.list_query import (
    ListQueryService,
    compose_where,
    run_list_query,
    run_list_query_from_input,
)

__all__ = [
    "ColumnFilter",
    "CustomFilter",
    "DefaultSort",
    "DefaultSortNotSortable",
    "FilterOp",
    "InputKind",
    "InvalidLimit",
    "InvalidListQueryConfig",
    "ItemResponseEnvelope",
    "ListQueryConfig",
    "ListQueryError",
    "ListQueryParams",
    "ListQueryResult",
    "ListQueryService",
    "ListResponseEnvelope",
    "ListResponseMeta",
    "ParsedListQuery",
    "SortDirection",
    "apply_operator",
    "classify_input",
    "compose_where",
    "item_response",
    "list_response",
    "parse_list_query",
    "resolve_params",
    "run_list_query",
    "run_list_query_from_input",
]
