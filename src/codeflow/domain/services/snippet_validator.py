"""Snippet input validation.

All checks run before any store call and raise the matching
``ValidationError`` subclass on the first violation.
"""

from typing import Sequence

from codeflow.core.config import Settings
from codeflow.core.exceptions import (
    InvalidFolderPathError,
    InvalidLanguageError,
    InvalidTagsError,
    InvalidTitleError,
    PayloadTooLargeError,
)
from codeflow.domain.entities.folder import PATH_SEPARATOR
from codeflow.domain.entities.language import Language


class SnippetValidator:
    """Validate snippet fields against the configured limits.

    Limits:
    - title: non-empty after trimming, at most ``max_title_length`` characters
    - code: at most ``max_code_size`` bytes once UTF-8 encoded
    - language: one of ``Language``
    - tags: at most ``max_tags`` entries, each non-empty and at most ``max_tag_length`` characters
    - folder path: segments non-empty and free of the path separator
    """

    def __init__(
        self,
        max_title_length: int = 200,
        max_code_size: int = 100_000,
        max_tags: int = 10,
        max_tag_length: int = 50,
    ) -> None:
        self.max_title_length = max_title_length
        self.max_code_size = max_code_size
        self.max_tags = max_tags
        self.max_tag_length = max_tag_length

    @classmethod
    def from_settings(cls, settings: Settings) -> "SnippetValidator":
        return cls(
            max_title_length=settings.max_title_length,
            max_code_size=settings.max_code_size,
            max_tags=settings.max_tags_per_snippet,
            max_tag_length=settings.max_tag_length,
        )

    def validate_title(self, title: str) -> str:
        """Validate a title and return it trimmed."""
        if not title or not title.strip():
            raise InvalidTitleError("Title cannot be empty")
        if len(title) > self.max_title_length:
            raise InvalidTitleError(
                f"Title exceeds maximum length of {self.max_title_length} characters"
            )
        return title.strip()

    def validate_code_size(self, code: str) -> None:
        size = len(code.encode("utf-8"))
        if size > self.max_code_size:
            raise PayloadTooLargeError(size, self.max_code_size)

    def validate_language(self, language: str) -> str:
        if language not in Language.values():
            raise InvalidLanguageError(
                f"Unsupported language '{language}'. Expected one of: {', '.join(Language.values())}"
            )
        return language

    def validate_tags(self, tags: Sequence[str]) -> list[str]:
        if len(tags) > self.max_tags:
            raise InvalidTagsError(f"Maximum {self.max_tags} tags allowed")
        for tag in tags:
            if not tag or not tag.strip():
                raise InvalidTagsError("Tags cannot be empty")
            if len(tag) > self.max_tag_length:
                raise InvalidTagsError(
                    f'Tag "{tag}" exceeds maximum length of {self.max_tag_length} characters'
                )
        return list(tags)

    def validate_folder_path(self, path: Sequence[str]) -> list[str]:
        for segment in path:
            if not segment or not segment.strip():
                raise InvalidFolderPathError("Folder names cannot be empty")
            if PATH_SEPARATOR in segment:
                raise InvalidFolderPathError(
                    f'Folder name "{segment}" cannot contain "{PATH_SEPARATOR}"'
                )
        return list(path)
