"""Folder entity for the path-addressed snippet hierarchy.

Folders have no parent/child links. A folder is addressed purely by its
materialized path, and every prefix of that path is itself a folder.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

PATH_SEPARATOR = "/"


def join_path(path: Sequence[str]) -> str:
    """Join path segments into the folder's string key ("a/b/c")."""
    return PATH_SEPARATOR.join(path)


def split_path(text: str) -> list[str]:
    """Split a joined folder path, ignoring empty segments.

    Examples:
        >>> split_path("work/python/")
        ['work', 'python']
        >>> split_path("")
        []
    """
    return [segment for segment in text.split(PATH_SEPARATOR) if segment]


def path_prefixes(path: Sequence[str]) -> list[list[str]]:
    """Return every prefix of ``path``, shortest first."""
    return [list(path[: length]) for length in range(1, len(path) + 1)]


@dataclass
class Folder:
    """Folder entity.

    Attributes:
        id: Document id, derived deterministically from owner and path.
        name: Last path segment.
        path: Full path as an ordered list of segment names.
        owner_id: User who owns the folder.
        created_at: Store-assigned creation time.
        updated_at: Store-assigned last modification time.
    """

    id: str
    name: str
    path: list[str]
    owner_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Folder path must not be empty")
        if self.name != self.path[-1]:
            raise ValueError("Folder name must be the last path segment")

    @property
    def path_key(self) -> str:
        return join_path(self.path)
