"""SQLAlchemy model for the documents table.

Every collection (``snippets``, ``folders``) lives in this one table; the
document body is schemaless JSON, while identity and timestamps are
managed by the store.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from codeflow.infrastructure.persistence.database import Base


class DocumentModel(Base):
    """A document in a named collection.

    Attributes:
        collection: Collection name.
        id: Document id, unique within its collection.
        data: Document body.
        created_at: Store-assigned creation time (naive UTC).
        updated_at: Store-assigned time of the last write (naive UTC).
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_collection_created_at", "collection", "created_at"),
    )

    collection: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Collection name",
    )
    id: Mapped[str] = mapped_column(
        String(512),
        primary_key=True,
        comment="Document ID, unique within the collection",
    )
    data: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Document body",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Document(collection={self.collection}, id={self.id})>"
