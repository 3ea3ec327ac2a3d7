"""Persistence repositories over the document store."""

from codeflow.infrastructure.persistence.repositories.folder_repository import (
    FolderPathResolver,
)
from codeflow.infrastructure.persistence.repositories.snippet_repository import (
    SnippetRepository,
    sort_by_recent_activity,
)

__all__ = [
    "FolderPathResolver",
    "SnippetRepository",
    "sort_by_recent_activity",
]
