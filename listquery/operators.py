from enum import Enum
from typing import Any, Callable, Dict, Union

from sqlalchemy.sql.elements import ColumnElement


class FilterOp(str, Enum):
    """Comparison operator applied to a column filter."""

    EQ = "eq"
    LIKE = "like"  # contains
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"  # membership


OperatorFn = Callable[[Any, Any], ColumnElement]


def _like(column, value) -> ColumnElement:
    # % and _ in the value are not escaped and act as wildcards.
    return column.like(f"%{value}%")


def _in(column, value) -> ColumnElement:
    values = list(value) if isinstance(value, (list, tuple)) else [value]
    return column.in_(values)


# Maps each FilterOp to the SQLAlchemy comparison it builds.
OPERATOR_MAP: Dict[FilterOp, OperatorFn] = {
    FilterOp.EQ: lambda column, value: column == value,
    FilterOp.LIKE: _like,
    FilterOp.GT: lambda column, value: column > value,
    FilterOp.GTE: lambda column, value: column >= value,
    FilterOp.LT: lambda column, value: column < value,
    FilterOp.LTE: lambda column, value: column <= value,
    FilterOp.IN: _in,
}


def apply_operator(op: Union[FilterOp, str], column, value: Any) -> ColumnElement:
    """Build the condition for ``column <op> value``.

    This is the building block used by ``parse_list_query``; it is also
    usable on its own for conditions built outside the query-param flow.

    Args:
        op: FilterOp member or its string value ("eq", "like", ...)
        column: SQLAlchemy column or ORM attribute
        value: Comparison value (a list for "in"; scalars are wrapped)

    Returns:
        SQLAlchemy boolean expression
    """
    return OPERATOR_MAP[FilterOp(op)](column, value)
