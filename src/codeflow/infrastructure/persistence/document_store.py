"""Document store client.

A stateless conduit over the ``documents`` table exposing collection
scoped get/query/add/update/delete and atomic batch writes. Timestamps
are assigned by the store on every write; callers never supply them.
There is no caching and no retrying: driver failures surface as
``StoreUnavailableError`` with the original exception chained.
"""

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Iterable, Literal, Mapping

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from codeflow.core.exceptions import (
    NotFoundError,
    QueryNotSupportedError,
    StoreUnavailableError,
)
from codeflow.core.logging import get_logger
from codeflow.infrastructure.persistence.database import DatabaseManager
from codeflow.infrastructure.persistence.models import DocumentModel

logger = get_logger(__name__)


class _DeleteField:
    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD: Any = _DeleteField()
"""Sentinel value that removes a field in ``update`` writes."""

ORDERABLE_FIELDS = ("id", "created_at", "updated_at")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_db_time(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def _from_db_time(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass(frozen=True)
class Document:
    """A document read from the store.

    Attributes:
        collection: Collection the document belongs to.
        id: Document id.
        data: Document body.
        created_at: Store-assigned creation time (UTC).
        updated_at: Store-assigned time of the last write (UTC).
    """

    collection: str
    id: str
    data: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class BatchWrite:
    """One write staged for ``DocumentStore.batch_commit``.

    ``set`` creates the document or replaces its body, ``update`` merges
    fields into an existing document and ``delete`` removes it.
    """

    op: Literal["set", "update", "delete"]
    collection: str
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def set(cls, collection: str, doc_id: str, data: Mapping[str, Any]) -> "BatchWrite":
        return cls("set", collection, doc_id, dict(data))

    @classmethod
    def update(cls, collection: str, doc_id: str, data: Mapping[str, Any]) -> "BatchWrite":
        return cls("update", collection, doc_id, dict(data))

    @classmethod
    def delete(cls, collection: str, doc_id: str) -> "BatchWrite":
        return cls("delete", collection, doc_id)


def _filter_clause(name: str, value: Any) -> ColumnElement[bool]:
    element = DocumentModel.data[name]
    if value is None:
        return element.as_string().is_(None)
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    if isinstance(value, str):
        return element.as_string() == value
    raise QueryNotSupportedError(
        f"Cannot filter on '{name}' with a {type(value).__name__} value"
    )


def _merge(body: Mapping[str, Any], changes: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(body)
    for key, value in changes.items():
        if value is DELETE_FIELD:
            merged.pop(key, None)
        else:
            merged[key] = value
    return merged


def _to_document(row: DocumentModel) -> Document:
    return Document(
        collection=row.collection,
        id=row.id,
        data=dict(row.data or {}),
        created_at=_from_db_time(row.created_at),
        updated_at=_from_db_time(row.updated_at),
    )


class DocumentStore:
    """Client for the document store.

    Args:
        db: Database manager providing sessions.
        clock: Source of server timestamps (UTC).
        composite_indexes: When False, queries that combine equality
            filters with a timestamp ordering are rejected with
            ``QueryNotSupportedError``, as a hosted store without the
            matching composite index would.
    """

    def __init__(
        self,
        db: DatabaseManager,
        clock: Callable[[], datetime] = utc_now,
        composite_indexes: bool = True,
    ) -> None:
        self._db = db
        self._clock = clock
        self.composite_indexes = composite_indexes

    def _now(self) -> datetime:
        return _to_db_time(self._clock())

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with self._db.session() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Document store operation failed", operation=operation, error=str(exc))
            raise StoreUnavailableError(f"Document store unavailable during {operation}") from exc

    async def get(self, collection: str, doc_id: str) -> Document | None:
        async with self._session("get") as session:
            row = await session.get(DocumentModel, (collection, doc_id))
            return _to_document(row) if row is not None else None

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
        start_after: str | None = None,
    ) -> list[Document]:
        """Return documents whose fields equal every value in ``filters``.

        Args:
            collection: Collection to query.
            filters: Field name to expected value (str, bool, int, float or None).
            order_by: Ordering on ``id``, ``created_at`` or ``updated_at``;
                documents are returned in id order when omitted.
            limit: Maximum number of documents.
            start_after: Return only documents whose id sorts after this one.
                Requires ascending id order.

        Raises:
            QueryNotSupportedError: If the ordering or a filter value cannot be served.
        """
        filters = dict(filters or {})
        if order_by is not None:
            if order_by.field not in ORDERABLE_FIELDS:
                raise QueryNotSupportedError(f"Cannot order by '{order_by.field}'")
            if filters and order_by.field != "id" and not self.composite_indexes:
                raise QueryNotSupportedError(
                    f"Query on '{collection}' filtered by {sorted(filters)} and ordered by "
                    f"'{order_by.field}' requires a composite index"
                )
        if start_after is not None and order_by is not None and (
            order_by.field != "id" or order_by.descending
        ):
            raise QueryNotSupportedError("start_after requires ascending id order")

        stmt = select(DocumentModel).where(DocumentModel.collection == collection)
        for name, value in filters.items():
            stmt = stmt.where(_filter_clause(name, value))
        if start_after is not None:
            stmt = stmt.where(DocumentModel.id > start_after)
        if order_by is not None and order_by.field != "id":
            column = getattr(DocumentModel, order_by.field)
            stmt = stmt.order_by(column.desc() if order_by.descending else column.asc())
        if order_by is not None and order_by.descending and order_by.field == "id":
            stmt = stmt.order_by(DocumentModel.id.desc())
        else:
            stmt = stmt.order_by(DocumentModel.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._session("query") as session:
            result = await session.execute(stmt)
            documents = [_to_document(row) for row in result.scalars().all()]

        logger.debug(
            "Documents queried",
            collection=collection,
            filters=sorted(filters),
            count=len(documents),
        )
        return documents

    async def count(self, collection: str, filters: Mapping[str, Any] | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(DocumentModel)
            .where(DocumentModel.collection == collection)
        )
        for name, value in (filters or {}).items():
            stmt = stmt.where(_filter_clause(name, value))
        async with self._session("count") as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def add(self, collection: str, data: Mapping[str, Any]) -> Document:
        """Insert a new document with a generated id."""
        if any(value is DELETE_FIELD for value in data.values()):
            raise ValueError("DELETE_FIELD is only valid in updates")
        now = self._now()
        row = DocumentModel(
            collection=collection,
            id=uuid.uuid4().hex,
            data=dict(data),
            created_at=now,
            updated_at=now,
        )
        async with self._session("add") as session:
            session.add(row)
            await session.commit()

        logger.info("Document added", collection=collection, doc_id=row.id)
        return _to_document(row)

    async def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> Document:
        """Merge ``data`` into an existing document and refresh ``updated_at``.

        Raises:
            NotFoundError: If the document does not exist.
        """
        async with self._session("update") as session:
            row = await session.get(DocumentModel, (collection, doc_id))
            if row is None:
                raise NotFoundError(collection, doc_id)
            row.data = _merge(row.data or {}, data)
            row.updated_at = self._now()
            await session.commit()

        logger.info(
            "Document updated", collection=collection, doc_id=doc_id, fields=sorted(data)
        )
        return _to_document(row)

    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        async with self._session("delete") as session:
            await session.execute(
                delete(DocumentModel).where(
                    DocumentModel.collection == collection,
                    DocumentModel.id == doc_id,
                )
            )
            await session.commit()

        logger.info("Document deleted", collection=collection, doc_id=doc_id)

    async def batch_commit(self, writes: Iterable[BatchWrite]) -> None:
        """Apply all writes in a single transaction.

        Either every write is applied or none is.

        Raises:
            ValueError: If ``writes`` is empty.
            NotFoundError: If an ``update`` targets a missing document.
        """
        writes = list(writes)
        if not writes:
            raise ValueError("Cannot commit an empty batch")

        now = self._now()
        async with self._session("batch_commit") as session:
            for write in writes:
                row = await session.get(DocumentModel, (write.collection, write.doc_id))
                if write.op == "set":
                    if row is None:
                        session.add(
                            DocumentModel(
                                collection=write.collection,
                                id=write.doc_id,
                                data=dict(write.data),
                                created_at=now,
                                updated_at=now,
                            )
                        )
                    else:
                        row.data = dict(write.data)
                        row.updated_at = now
                elif write.op == "update":
                    if row is None:
                        raise NotFoundError(write.collection, write.doc_id)
                    row.data = _merge(row.data or {}, write.data)
                    row.updated_at = now
                elif write.op == "delete":
                    if row is not None:
                        await session.delete(row)
                else:
                    raise ValueError(f"Unknown batch operation '{write.op}'")
                # later writes in the batch must see earlier ones
                await session.flush()
            await session.commit()

        logger.info(
            "Batch committed",
            writes=len(writes),
            collections=sorted({w.collection for w in writes}),
        )
