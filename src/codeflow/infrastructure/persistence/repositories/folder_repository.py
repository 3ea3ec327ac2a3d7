"""Folder path resolution.

Folders are created lazily: saving a snippet into ``["work", "python"]``
makes sure both ``work`` and ``work/python`` exist first. All missing
prefixes of one path are created in a single atomic batch, so a failure
never leaves a path half-created.
"""

from typing import Sequence

from codeflow.core.logging import get_logger
from codeflow.domain.entities.folder import Folder, join_path, path_prefixes, split_path
from codeflow.infrastructure.persistence.document_store import (
    BatchWrite,
    Document,
    DocumentStore,
)

logger = get_logger(__name__)


class FolderPathResolver:
    """Ensures every prefix of a folder path exists as a folder document."""

    COLLECTION = "folders"

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    @staticmethod
    def folder_id(owner_id: str, path: Sequence[str]) -> str:
        """Deterministic document id for ``path`` within ``owner_id``'s tree.

        The owner prefix keeps two users who pick the same path from
        sharing one folder document. The owner-free joined path is stored
        separately as ``path_key``.

        Examples:
            >>> FolderPathResolver.folder_id("u1", ["a", "b", "c"])
            'u1:a/b/c'
        """
        return f"{owner_id}:{join_path(path)}"

    async def ensure_path(self, path: Sequence[str], owner_id: str) -> list[str]:
        """Create any missing folders along ``path``.

        Args:
            path: Folder segments, outermost first. Empty means the root.
            owner_id: Owner of the folders.

        Returns:
            Ids of the folders created by this call (empty when the whole
            path already existed).
        """
        if not path:
            return []

        writes: list[BatchWrite] = []
        for prefix in path_prefixes(path):
            doc_id = self.folder_id(owner_id, prefix)
            if await self.store.get(self.COLLECTION, doc_id) is not None:
                continue
            writes.append(
                BatchWrite.set(
                    self.COLLECTION,
                    doc_id,
                    {
                        "name": prefix[-1],
                        "path": list(prefix),
                        "path_key": join_path(prefix),
                        "user_id": owner_id,
                    },
                )
            )

        if not writes:
            return []

        await self.store.batch_commit(writes)
        created = [write.doc_id for write in writes]
        logger.info(
            "Folders created",
            owner_id=owner_id,
            path=join_path(path),
            created=len(created),
        )
        return created

    async def get_folder(self, path: Sequence[str], owner_id: str) -> Folder | None:
        doc = await self.store.get(self.COLLECTION, self.folder_id(owner_id, path))
        return self._to_entity(doc) if doc is not None else None

    async def list_folders(self, owner_id: str) -> list[Folder]:
        """All folders owned by ``owner_id``, ordered by path."""
        docs = await self.store.query(self.COLLECTION, {"user_id": owner_id})
        folders = [self._to_entity(doc) for doc in docs]
        folders.sort(key=lambda folder: folder.path)
        return folders

    @staticmethod
    def _to_entity(doc: Document) -> Folder:
        path = list(doc.get("path") or split_path(doc.get("path_key", "")))
        return Folder(
            id=doc.id,
            name=doc.get("name") or path[-1],
            path=path,
            owner_id=str(doc.get("user_id", "")),
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )
