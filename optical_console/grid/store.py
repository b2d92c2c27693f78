"""
Record-store boundary.

The grid never talks to SQLAlchemy directly; it goes through a RecordStore
bound to one logical table. Rows come back as pydantic schemas so callers
never see ORM objects.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """select/insert/update/delete over one table.

    `filters` maps column -> value (None means IS NULL). `order_by` lists
    column names; a leading "-" sorts descending. Implementations raise
    StoreError for backend failures and NotFoundError for unknown ids.
    """

    table: str = ""

    @abstractmethod
    async def select(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> list:
        ...

    @abstractmethod
    async def get(self, record_id: UUID):
        ...

    @abstractmethod
    async def insert(self, values: Mapping[str, Any]):
        ...

    @abstractmethod
    async def update(self, record_id: UUID, values: Mapping[str, Any]):
        ...

    @abstractmethod
    async def delete(self, record_id: UUID) -> None:
        ...


class SqlRecordStore(RecordStore):
    def __init__(self, db: AsyncSession, model, schema):
        self.db = db
        self.model = model
        self.schema = schema
        self.table = model.__tablename__

    def _column(self, name: str):
        if name not in self.model.__table__.c:
            raise ValidationError(f"unknown column on {self.table}: {name}")
        return getattr(self.model, name)

    def _coerce(self, row):
        return self.schema(**row.to_schema)

    @asynccontextmanager
    async def _guard(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("[store] %s on %s failed: %r", action, self.table, e)
            raise StoreError(f"{action} on {self.table} failed: {e}") from e

    async def select(self, filters=None, order_by=None, limit=None) -> list:
        stmt = select(self.model)
        for name, value in (filters or {}).items():
            col = self._column(name)
            stmt = stmt.where(col.is_(None) if value is None else col == value)
        for name in order_by or ():
            col = self._column(name.lstrip("-"))
            stmt = stmt.order_by(col.desc() if name.startswith("-") else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._guard("select"):
            res = await self.db.execute(stmt)
            rows = res.scalars().all()
        return [self._coerce(r) for r in rows]

    async def _load(self, record_id: UUID):
        async with self._guard("get"):
            row = await self.db.get(self.model, record_id)
        if row is None:
            raise NotFoundError(f"{self.table} record {record_id} not found")
        return row

    async def get(self, record_id: UUID):
        return self._coerce(await self._load(record_id))

    async def insert(self, values):
        for name in values:
            self._column(name)
        row = self.model(**values)
        async with self._guard("insert"):
            self.db.add(row)
            await self.db.commit()
            await self.db.refresh(row)
        return self._coerce(row)

    async def update(self, record_id: UUID, values):
        row = await self._load(record_id)
        for name, value in values.items():
            self._column(name)
            setattr(row, name, value)
        async with self._guard("update"):
            await self.db.commit()
            await self.db.refresh(row)
        return self._coerce(row)

    async def delete(self, record_id: UUID) -> None:
        row = await self._load(record_id)
        async with self._guard("delete"):
            await self.db.delete(row)
            await self.db.commit()
