import asyncio
import logging
from typing import Any, Generic, List, Literal, Optional, Tuple, TypeVar, Union

from sqlalchemy import Table, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import func, select

from listquery.parser import parse_list_query
from listquery.responses import list_response
from listquery.schemas.config import ListQueryConfig
from listquery.schemas.query import ListQueryResult, ParsedListQuery
from listquery.schemas.responses import ListResponseEnvelope, ListResponseMeta

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")

Mode = Literal["rows", "envelope"]
_MODES = ("rows", "envelope")


def compose_where(
    base_where: Optional[ColumnElement],
    query_where: Optional[ColumnElement],
) -> Optional[ColumnElement]:
    """AND the base (authorization) condition with the parsed filters.

    Either side may be None. The base condition is never dropped.
    """
    if base_where is not None and query_where is not None:
        return and_(base_where, query_where)
    return base_where if base_where is not None else query_where


def _is_session(db: Any) -> bool:
    # Anything else is treated as a session factory (async_sessionmaker).
    return isinstance(db, AsyncSession) or hasattr(db, "execute")


class ListQueryService(Generic[ModelType]):
    """Runs parsed list queries against one model or table."""

    def __init__(self, model: Any):
        self.model = model

    def rows_statement(self, query: ParsedListQuery, where: Optional[ColumnElement]):
        statement = select(self.model)
        if where is not None:
            statement = statement.where(where)
        return (
            statement.order_by(query.order_by)
            .limit(query.limit)
            .offset(query.offset)
        )

    def count_statement(self, where: Optional[ColumnElement]):
        statement = select(func.count()).select_from(self.model)
        if where is not None:
            statement = statement.where(where)
        return statement

    async def _fetch_rows(self, session: AsyncSession, statement) -> List[Any]:
        result = await session.execute(statement)
        if isinstance(self.model, Table):
            return [dict(row) for row in result.mappings().all()]
        return list(result.scalars().all())

    async def _fetch_count(self, session: AsyncSession, statement) -> int:
        result = await session.execute(statement)
        return result.scalar() or 0

    async def _fetch_rows_and_count(
        self, db: Any, rows_stmt, count_stmt
    ) -> Tuple[List[Any], int]:
        if _is_session(db):
            # One session cannot run two statements at once.
            logger.debug("Running rows and count sequentially on a single session")
            rows = await self._fetch_rows(db, rows_stmt)
            total = await self._fetch_count(db, count_stmt)
            return rows, total

        async def _rows():
            async with db() as session:
                return await self._fetch_rows(session, rows_stmt)

        async def _count():
            async with db() as session:
                return await self._fetch_count(session, count_stmt)

        logger.debug("Running rows and count concurrently on separate sessions")
        tasks = [asyncio.create_task(_rows()), asyncio.create_task(_count())]
        try:
            rows, total = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Wait for the cancelled query so its session is closed before re-raising.
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return rows, total

    async def _fetch_rows_only(self, db: Any, rows_stmt) -> List[Any]:
        if _is_session(db):
            return await self._fetch_rows(db, rows_stmt)
        async with db() as session:
            return await self._fetch_rows(session, rows_stmt)

    async def run(
        self,
        db: Any,
        query: ParsedListQuery,
        base_where: Optional[ColumnElement] = None,
        count: bool = True,
        mode: Mode = "rows",
    ) -> Union[ListQueryResult, ListResponseEnvelope]:
        """Execute a parsed list query.

        Args:
            db: AsyncSession, or a session factory (async_sessionmaker) to run
                the rows and count queries concurrently
            query: Result of ``parse_list_query``
            base_where: Condition that always applies (e.g. ownership scope)
            count: True for an exact ``count(*)``; False for a single query
                with heuristic metadata (``total = offset + len(rows)``,
                ``has_more = len(rows) == limit``)
            mode: "rows" for ListQueryResult, "envelope" for
                ListResponseEnvelope

        Returns:
            ListQueryResult or ListResponseEnvelope

        Raises:
            ValueError: If mode is not "rows" or "envelope"
        """
        if mode not in _MODES:
            raise ValueError(f'mode must be "rows" or "envelope", got {mode!r}')

        where = compose_where(base_where, query.where)
        rows_stmt = self.rows_statement(query, where)

        if count:
            # No shared transaction: total may drift from rows under concurrent writes.
            rows, total = await self._fetch_rows_and_count(db, rows_stmt, self.count_statement(where))
            has_more = query.offset + len(rows) < total
            if mode == "envelope":
                return list_response(rows, total, query.limit, query.offset)
            return ListQueryResult(rows=rows, total=total, has_more=has_more)

        rows = await self._fetch_rows_only(db, rows_stmt)
        total = query.offset + len(rows)
        has_more = len(rows) == query.limit

        if mode == "envelope":
            return ListResponseEnvelope(
                data=rows,
                meta=ListResponseMeta(
                    total=total,
                    limit=query.limit,
                    offset=query.offset,
                    has_more=has_more,
                ),
            )
        return ListQueryResult(rows=rows, total=total, has_more=has_more)

    async def run_from_input(
        self,
        db: Any,
        raw: Any,
        config: ListQueryConfig,
        base_where: Optional[ColumnElement] = None,
        count: bool = True,
        mode: Mode = "rows",
    ) -> Union[ListQueryResult, ListResponseEnvelope]:
        """Parse ``raw`` with ``config``, then execute it like ``run``."""
        return await self.run(
            db,
            parse_list_query(raw, config),
            base_where=base_where,
            count=count,
            mode=mode,
        )


async def run_list_query(
    db: Any,
    table: Any,
    query: ParsedListQuery,
    base_where: Optional[ColumnElement] = None,
    count: bool = True,
    mode: Mode = "rows",
) -> Union[ListQueryResult, ListResponseEnvelope]:
    """Execute a pre-parsed query against ``table``. See ``ListQueryService.run``."""
    return await ListQueryService(table).run(
        db, query, base_where=base_where, count=count, mode=mode
    )


async def run_list_query_from_input(
    db: Any,
    table: Any,
    raw: Any,
    config: ListQueryConfig,
    base_where: Optional[ColumnElement] = None,
    count: bool = True,
    mode: Mode = "rows",
) -> Union[ListQueryResult, ListResponseEnvelope]:
    """Parse raw input and execute it against ``table``."""
    return await ListQueryService(table).run_from_input(
        db, raw, config, base_where=base_where, count=count, mode=mode
    )
