"""Rewrite legacy snippet fields to the current schema.

Older snippet documents store their owner under ``userId`` and their
source under ``content``. This service pages through the ``snippets``
collection in id order and writes ``user_id`` / ``code`` for every
document that lacks them, one batch per page.
"""

from dataclasses import dataclass
from typing import Any

from codeflow.core.logging import get_logger
from codeflow.infrastructure.persistence.document_store import (
    DELETE_FIELD,
    BatchWrite,
    Document,
    DocumentStore,
    OrderBy,
)

logger = get_logger(__name__)

MAX_PAGE_SIZE = 500

# legacy field -> current field
LEGACY_FIELDS = {"userId": "user_id", "content": "code"}


@dataclass(frozen=True)
class MigrationReport:
    scanned: int
    migrated: int
    dry_run: bool
    delete_old_field: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "dry_run": self.dry_run,
            "delete_old_field": self.delete_old_field,
            "scanned": self.scanned,
            "migrated": self.migrated,
        }


def _legacy_changes(doc: Document, delete_old_field: bool) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for legacy, current in LEGACY_FIELDS.items():
        value = doc.get(legacy)
        if not isinstance(value, str) or not value:
            continue
        if doc.get(current):
            continue
        changes[current] = value
        if delete_old_field:
            changes[legacy] = DELETE_FIELD
    return changes


class LegacyFieldMigration:
    """Migrates ``snippets`` documents from legacy field names.

    Args:
        store: Document store to migrate.
        collection: Collection holding the snippets.
    """

    def __init__(self, store: DocumentStore, collection: str = "snippets") -> None:
        self.store = store
        self.collection = collection

    async def run(
        self,
        dry_run: bool = False,
        delete_old_field: bool = True,
        limit: int = MAX_PAGE_SIZE,
    ) -> MigrationReport:
        """Scan the collection and migrate documents page by page.

        Args:
            dry_run: Count documents that need migrating without writing.
            delete_old_field: Remove the legacy field after copying it.
            limit: Page size, between 1 and 500.

        Raises:
            ValueError: If ``limit`` is out of range.
        """
        if limit <= 0 or limit > MAX_PAGE_SIZE:
            raise ValueError(f"limit must be a number between 1 and {MAX_PAGE_SIZE}")

        scanned = 0
        migrated = 0
        last_id: str | None = None

        while True:
            page = await self.store.query(
                self.collection,
                order_by=OrderBy("id"),
                limit=limit,
                start_after=last_id,
            )
            if not page:
                break

            writes: list[BatchWrite] = []
            for doc in page:
                scanned += 1
                changes = _legacy_changes(doc, delete_old_field)
                if changes:
                    migrated += 1
                    if not dry_run:
                        writes.append(BatchWrite.update(self.collection, doc.id, changes))
                last_id = doc.id

            if writes:
                await self.store.batch_commit(writes)
                logger.info("Migration batch committed", writes=len(writes), last_id=last_id)

            if len(page) < limit:
                break

        report = MigrationReport(
            scanned=scanned,
            migrated=migrated,
            dry_run=dry_run,
            delete_old_field=delete_old_field,
        )
        logger.info(
            "Legacy field migration finished",
            scanned=scanned,
            migrated=migrated,
            dry_run=dry_run,
        )
        return report
