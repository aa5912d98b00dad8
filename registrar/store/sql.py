"""
Registrar Backend: SQLAlchemy Document Store
=============================================

What:  DocumentStore backed by the `students` and `courses` tables.
How:   Every collection call opens its own AsyncSession and transaction, so
       a call is atomic on its own and durable as soon as it returns. There
       is intentionally no way to group two calls into one transaction: the
       enrollment service's write ordering is the consistency mechanism, and
       it must behave the same here as against the in-memory store.

Predicate translation:
    Eq        → column = :value
    In        → column IN (:values)
    Contains  → CAST(json_column AS TEXT) LIKE '%"<value>"%'
    Matches   → lower(column) LIKE '%<text>%'   (JSON columns are cast first)

    On JSON columns the LIKE is only a coarse filter over the serialized
    array: a needle can span two elements or the quotes between them. Rows
    it selects are re-checked in Python with the predicate's own matches(),
    so Contains and Matches select exactly the documents the in-memory
    store selects. Scalar columns need no re-check.

Row locking:
    update_by_id / update_many read and write a row inside one transaction.
    PostgreSQL: the rows are selected FOR UPDATE, so a concurrent writer
    waits for the row lock.
    SQLite: FOR UPDATE is not rendered. The engine must be passed through
    database.configure_sqlite_engine(), which starts every transaction with
    BEGIN IMMEDIATE and so serializes writers on the database lock.
    Either way a read-modify-write of a JSON list cannot interleave with
    another writer on the same row.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Type

from sqlalchemy import JSON, String, cast, delete, func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from registrar.database import Base
from registrar.exceptions import ConflictError
from registrar.models.course import Course
from registrar.models.student import Student
from registrar.store.base import DocumentCollection, DocumentStore
from registrar.store.query import Contains, Document, Eq, In, Matches, Predicate, Update

logger = logging.getLogger(__name__)


class SqlCollection(DocumentCollection):
    """
    One ORM-mapped table exposed through the DocumentCollection interface.

    Args:
        name: Collection name used in messages ("students", "courses")
        model: ORM class providing `to_document()`
        session_factory: async_sessionmaker that yields a fresh session per call
        unique_fields: Columns with a UNIQUE constraint, for conflict messages
    """

    def __init__(
        self,
        name: str,
        model: Type[Base],
        session_factory: async_sessionmaker,
        unique_fields: Sequence[str] = (),
    ):
        self.name = name
        self.model = model
        self._session_factory = session_factory
        self.unique_fields = tuple(unique_fields)
        self._columns = {column.key for column in model.__table__.columns}

    # ── Translation helpers ───────────────────────────────────────────────

    def _column(self, field_name: str):
        if field_name not in self._columns:
            raise ValueError(f"Unknown field '{field_name}' for collection '{self.name}'")
        return getattr(self.model, field_name)

    def _clause(self, predicate: Predicate):
        column = self._column(predicate.field)
        if isinstance(predicate, Eq):
            return column == predicate.value
        if isinstance(predicate, In):
            return column.in_(list(predicate.values))
        if isinstance(predicate, Contains):
            needle = json.dumps(predicate.value, ensure_ascii=False)
            return cast(column, String).contains(needle, autoescape=True)
        if isinstance(predicate, Matches):
            target = cast(column, String) if isinstance(column.type, JSON) else column
            lowered = func.lower(target, type_=String)
            return lowered.contains(predicate.text.lower(), autoescape=True)
        raise TypeError(f"Unsupported predicate: {predicate!r}")

    def _select(self, predicate: Optional[Predicate]):
        query = select(self.model)
        if predicate is not None:
            query = query.where(self._clause(predicate))
        return query.order_by(self.model.created_at, self.model.id)

    def _needs_recheck(self, predicate: Optional[Predicate]) -> bool:
        if not isinstance(predicate, (Contains, Matches)):
            return False
        return isinstance(self._column(predicate.field).type, JSON)

    async def _fetch(self, session, predicate: Optional[Predicate], for_update: bool = False):
        query = self._select(predicate)
        if for_update:
            query = query.with_for_update()
        rows = (await session.execute(query)).scalars().all()
        if self._needs_recheck(predicate):
            rows = [row for row in rows if predicate.matches(row.to_document())]
        return list(rows)

    def _conflict(self, exc: IntegrityError) -> ConflictError:
        fields = ", ".join(self.unique_fields) or "id"
        logger.info("Unique constraint violated in %s: %s", self.name, exc.orig)
        return ConflictError(
            message=f"A document in '{self.name}' already uses the same {fields}",
            field=self.unique_fields[0] if len(self.unique_fields) == 1 else None,
            context={"collection": self.name},
        )

    def _apply(self, row: Any, update: Update) -> None:
        updated = update.apply(row.to_document())
        for field_name in update.touched_fields():
            if field_name == "id":
                continue
            self._column(field_name)
            setattr(row, field_name, updated[field_name])
        row.updated_at = datetime.now(timezone.utc)

    # ── DocumentCollection API ────────────────────────────────────────────

    async def find_by_id(self, document_id: str) -> Optional[Document]:
        async with self._session_factory() as session:
            row = await session.get(self.model, document_id)
            return row.to_document() if row is not None else None

    async def find_where(self, predicate: Optional[Predicate] = None) -> List[Document]:
        async with self._session_factory() as session:
            rows = await self._fetch(session, predicate)
            return [row.to_document() for row in rows]

    async def insert(self, document: Document) -> Document:
        values: Dict[str, Any] = {
            key: value for key, value in document.items() if key in self._columns
        }
        now = datetime.now(timezone.utc)
        values.setdefault("id", uuid.uuid4().hex)
        values["created_at"] = now
        values["updated_at"] = now
        row = self.model(**values)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
        except IntegrityError as exc:
            raise self._conflict(exc) from exc
        return row.to_document()

    async def update_by_id(self, document_id: str, update: Update) -> Optional[Document]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.get(self.model, document_id, with_for_update=True)
                    if row is None:
                        return None
                    self._apply(row, update)
        except IntegrityError as exc:
            raise self._conflict(exc) from exc
        return row.to_document()

    async def delete_by_id(self, document_id: str) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    delete(self.model).where(self.model.id == document_id)
                )
        return result.rowcount > 0

    async def update_many(self, predicate: Optional[Predicate], update: Update) -> int:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    rows = await self._fetch(session, predicate, for_update=True)
                    for row in rows:
                        self._apply(row, update)
        except IntegrityError as exc:
            raise self._conflict(exc) from exc
        return len(rows)


class SqlDocumentStore(DocumentStore):
    """Students and courses persisted through async SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory
        self.students = SqlCollection(
            "students", Student, session_factory, unique_fields=("student_code",)
        )
        self.courses = SqlCollection(
            "courses", Course, session_factory, unique_fields=("name",)
        )

    async def ping(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Store ping failed: %s", str(e))
            return False
