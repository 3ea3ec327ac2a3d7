"""Snippet entity: a saved unit of source code with language and metadata."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from codeflow.domain.entities.folder import join_path


@dataclass
class Snippet:
    """Snippet entity.

    Attributes:
        id: Store-assigned identifier, immutable after creation.
        title: Display title (may carry a disambiguation suffix).
        code: Source code.
        language: One of the values of ``Language``.
        owner_id: User who created the snippet; never reassigned.
        folder_path: Ordered folder segments, empty for the root.
        tags: Free-form tags.
        is_favorite: Whether the user starred the snippet.
        original_title: Title as entered, before disambiguation.
        created_at: Store-assigned creation time.
        updated_at: Store-assigned time of the last mutation.
    """

    id: str
    title: str
    code: str
    language: str
    owner_id: str
    folder_path: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_favorite: bool = False
    original_title: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Snippet ID is required")
        if not self.owner_id:
            raise ValueError("Owner ID is required")

    @property
    def folder(self) -> str:
        return join_path(self.folder_path)

    @property
    def last_activity(self) -> datetime:
        """Most recent of the creation and update times."""
        return max(self.created_at, self.updated_at)
