"""Repository for snippet documents.

Every operation acts on behalf of the user reported by the injected
identity provider. Inputs are validated before any store call, and
mutations read the document first so that existence and ownership are
verified before anything is written.
"""

from datetime import datetime
from typing import Any, Callable, Sequence

from codeflow.core.config import Settings
from codeflow.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    QueryNotSupportedError,
    QuotaExceededError,
    UnauthenticatedError,
)
from codeflow.core.logging import get_logger
from codeflow.domain.entities.folder import join_path, split_path
from codeflow.domain.entities.identity import IdentityProvider
from codeflow.domain.entities.snippet import Snippet
from codeflow.domain.services.snippet_validator import SnippetValidator
from codeflow.domain.services.title_disambiguator import disambiguate_title
from codeflow.infrastructure.persistence.document_store import (
    DELETE_FIELD,
    Document,
    DocumentStore,
    OrderBy,
    utc_now,
)
from codeflow.infrastructure.persistence.repositories.folder_repository import (
    FolderPathResolver,
)

logger = get_logger(__name__)


def sort_by_recent_activity(snippets: Sequence[Snippet]) -> list[Snippet]:
    """Order snippets by the most recent of their update and creation times.

    This is the fallback ordering used when the store cannot sort a
    filtered query itself. The sort is stable, so snippets with equal
    timestamps keep the order the store returned them in.
    """
    return sorted(snippets, key=lambda snippet: snippet.last_activity, reverse=True)


class SnippetRepository:
    """CRUD operations over the ``snippets`` collection."""

    COLLECTION = "snippets"

    def __init__(
        self,
        store: DocumentStore,
        identity_provider: IdentityProvider,
        folder_resolver: FolderPathResolver | None = None,
        validator: SnippetValidator | None = None,
        max_snippets_per_user: int = 1000,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.identity_provider = identity_provider
        self.folder_resolver = folder_resolver or FolderPathResolver(store)
        self.validator = validator or SnippetValidator()
        self.max_snippets_per_user = max_snippets_per_user
        self._clock = clock

    @classmethod
    def from_settings(
        cls,
        store: DocumentStore,
        identity_provider: IdentityProvider,
        settings: Settings,
    ) -> "SnippetRepository":
        return cls(
            store,
            identity_provider,
            validator=SnippetValidator.from_settings(settings),
            max_snippets_per_user=settings.max_snippets_per_user,
        )

    def _require_user(self) -> str:
        identity = self.identity_provider.current_identity()
        if identity is None:
            raise UnauthenticatedError()
        return identity.user_id

    async def create(
        self,
        title: str,
        code: str,
        language: str,
        folder_path: Sequence[str] | None = None,
        tags: Sequence[str] | None = None,
        is_favorite: bool = False,
    ) -> Snippet:
        """Create a snippet owned by the acting user.

        If the owner already has a snippet with the same title in the same
        folder, the new snippet's title gets a timestamp suffix; the
        entered title is kept as ``original_title``. Missing folders along
        ``folder_path`` are created first.

        Raises:
            UnauthenticatedError: No user is signed in.
            ValidationError: A field is invalid.
            QuotaExceededError: The owner has reached the snippet limit.
        """
        owner_id = self._require_user()
        title = self.validator.validate_title(title)
        self.validator.validate_code_size(code)
        language = self.validator.validate_language(language)
        tags = self.validator.validate_tags(tags or [])
        folder_path = self.validator.validate_folder_path(folder_path or [])

        owned = await self.store.count(self.COLLECTION, {"user_id": owner_id})
        if owned >= self.max_snippets_per_user:
            raise QuotaExceededError(
                f"Snippet limit of {self.max_snippets_per_user} reached"
            )

        persisted_title = await self._unique_title(owner_id, title, folder_path)
        if folder_path:
            await self.folder_resolver.ensure_path(folder_path, owner_id)

        doc = await self.store.add(
            self.COLLECTION,
            {
                "title": persisted_title,
                "original_title": title,
                "code": code,
                "language": language,
                "user_id": owner_id,
                "folder": join_path(folder_path),
                "folder_path": folder_path,
                "tags": tags,
                "is_favorite": is_favorite,
            },
        )
        logger.info(
            "Snippet created",
            snippet_id=doc.id,
            owner_id=owner_id,
            folder=join_path(folder_path),
            disambiguated=persisted_title != title,
        )
        return self._to_entity(doc)

    async def get(self, snippet_id: str) -> Snippet:
        """Fetch a snippet owned by the acting user.

        Raises:
            NotFoundError: The snippet does not exist.
            ForbiddenError: The snippet belongs to someone else.
        """
        owner_id = self._require_user()
        doc = await self._get_owned(snippet_id, owner_id)
        return self._to_entity(doc)

    async def update(
        self,
        snippet_id: str,
        title: str,
        code: str,
        language: str,
        tags: Sequence[str] | None = None,
    ) -> Snippet:
        """Overwrite the editable fields of an existing snippet.

        Titles are not disambiguated on update.

        Raises:
            NotFoundError: The snippet does not exist.
            ForbiddenError: The snippet belongs to someone else.
        """
        owner_id = self._require_user()
        changes: dict[str, Any] = {
            "title": self.validator.validate_title(title),
            "code": code,
            "language": self.validator.validate_language(language),
        }
        self.validator.validate_code_size(code)
        if tags is not None:
            changes["tags"] = self.validator.validate_tags(tags)

        existing = await self._get_owned(snippet_id, owner_id)
        # rewrite legacy fields so the snippet shows up in owner listings
        if not existing.get("user_id"):
            changes["user_id"] = owner_id
        for legacy in ("userId", "content"):
            if legacy in existing.data:
                changes[legacy] = DELETE_FIELD
        doc = await self.store.update(self.COLLECTION, snippet_id, changes)
        logger.info("Snippet updated", snippet_id=snippet_id, owner_id=owner_id)
        return self._to_entity(doc)

    async def save(
        self,
        snippet_id: str | None,
        title: str,
        code: str,
        language: str,
        folder_path: Sequence[str] | None = None,
    ) -> Snippet:
        """Update ``snippet_id`` if given, otherwise create a new snippet."""
        if snippet_id:
            return await self.update(snippet_id, title, code, language)
        return await self.create(title, code, language, folder_path=folder_path)

    async def set_favorite(self, snippet_id: str, is_favorite: bool) -> Snippet:
        owner_id = self._require_user()
        await self._get_owned(snippet_id, owner_id)
        doc = await self.store.update(
            self.COLLECTION, snippet_id, {"is_favorite": bool(is_favorite)}
        )
        return self._to_entity(doc)

    async def delete(self, snippet_id: str) -> None:
        """Delete a snippet after verifying it exists and is owned by the acting user.

        Raises:
            NotFoundError: The snippet does not exist.
            ForbiddenError: The snippet belongs to someone else.
        """
        owner_id = self._require_user()
        await self._get_owned(snippet_id, owner_id)
        await self.store.delete(self.COLLECTION, snippet_id)
        logger.info("Snippet deleted", snippet_id=snippet_id, owner_id=owner_id)

    async def list_by_owner(self, owner_id: str | None = None) -> list[Snippet]:
        """List the acting user's snippets, newest first.

        The store is asked to order by creation time. When it cannot (no
        composite index for the owner filter), the snippets are fetched
        unordered and sorted here by most recent activity instead.

        Raises:
            ForbiddenError: ``owner_id`` is not the acting user.
        """
        acting_id = self._require_user()
        owner_id = owner_id or acting_id
        if owner_id != acting_id:
            raise ForbiddenError(
                self.COLLECTION, owner_id, "Cannot list another user's snippets"
            )

        filters = {"user_id": owner_id}
        try:
            docs = await self.store.query(
                self.COLLECTION, filters, order_by=OrderBy("created_at", descending=True)
            )
        except QueryNotSupportedError as exc:
            logger.warning(
                "Ordered snippet query unavailable, sorting client-side",
                owner_id=owner_id,
                reason=exc.message,
            )
            docs = await self.store.query(self.COLLECTION, filters)
            return sort_by_recent_activity([self._to_entity(doc) for doc in docs])

        return [self._to_entity(doc) for doc in docs]

    async def _get_owned(self, snippet_id: str, owner_id: str) -> Document:
        doc = await self.store.get(self.COLLECTION, snippet_id)
        if doc is None:
            raise NotFoundError(self.COLLECTION, snippet_id)
        if self._owner_of(doc) != owner_id:
            logger.warning(
                "Snippet ownership check failed",
                snippet_id=snippet_id,
                acting_user=owner_id,
            )
            raise ForbiddenError(self.COLLECTION, snippet_id)
        return doc

    async def _unique_title(self, owner_id: str, title: str, folder_path: list[str]) -> str:
        folder = join_path(folder_path)
        if not await self._title_taken(owner_id, title, folder):
            return title

        moment = self._clock()
        attempt = 1
        while True:
            candidate = disambiguate_title(
                title, moment, attempt, max_length=self.validator.max_title_length
            )
            if not await self._title_taken(owner_id, candidate, folder):
                return candidate
            attempt += 1

    async def _title_taken(self, owner_id: str, title: str, folder: str) -> bool:
        matches = await self.store.query(
            self.COLLECTION,
            {"user_id": owner_id, "title": title, "folder": folder},
            limit=1,
        )
        return bool(matches)

    @staticmethod
    def _owner_of(doc: Document) -> str:
        # Older documents carry the owner as userId
        return str(doc.get("user_id") or doc.get("userId") or "")

    @classmethod
    def _to_entity(cls, doc: Document) -> Snippet:
        folder_path = doc.get("folder_path")
        if folder_path is None:
            folder_path = split_path(doc.get("folder") or "")
        return Snippet(
            id=doc.id,
            title=str(doc.get("title", "")),
            code=str(doc.get("code", doc.get("content", ""))),
            language=str(doc.get("language", "")),
            owner_id=cls._owner_of(doc),
            folder_path=list(folder_path),
            tags=list(doc.get("tags") or []),
            is_favorite=bool(doc.get("is_favorite", False)),
            original_title=doc.get("original_title"),
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )
