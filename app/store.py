"""
Store adapter: the only code that talks to the database.

Services hand it SQLAlchemy Core statements (every value is a bound
parameter) and get back plain dict rows or an affected-row count.  Any
SQLAlchemy failure is re-raised as ``StoreError``; nothing is retried.

Calls are awaited one at a time by the caller; the adapter holds no state
beyond the request's ``AsyncSession``.
"""
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.expression import Executable

from app.errors import StoreError


@dataclass(frozen=True)
class StoreResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    affected: int = 0


class Store:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def execute(self, statement: Executable) -> StoreResult:
        try:
            result = await self._session.execute(statement)
            if result.returns_rows:
                rows = [dict(row) for row in result.mappings().all()]
                return StoreResult(rows=rows, affected=len(rows))
            return StoreResult(affected=result.rowcount)
        except SQLAlchemyError as exc:
            raise StoreError(f"statement failed: {exc.__class__.__name__}") from exc

    async def fetch_all(self, statement: Executable) -> list[dict[str, Any]]:
        return (await self.execute(statement)).rows

    async def fetch_one(self, statement: Executable) -> dict[str, Any] | None:
        rows = (await self.execute(statement)).rows
        return rows[0] if rows else None

    async def insert(self, statement: Insert) -> int:
        """Run a single-row INSERT and return the generated primary key."""
        table = statement.table
        rows = (await self.execute(statement.returning(table.c.id))).rows
        return rows[0]["id"]
