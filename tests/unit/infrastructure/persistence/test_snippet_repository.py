"""Tests for SnippetRepository."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from codeflow.core.exceptions import (
    ForbiddenError,
    InvalidLanguageError,
    InvalidTitleError,
    NotFoundError,
    PayloadTooLargeError,
    QuotaExceededError,
    UnauthenticatedError,
)
from codeflow.domain.entities.identity import StaticIdentityProvider
from codeflow.domain.services.snippet_validator import SnippetValidator
from codeflow.infrastructure.persistence.document_store import Document, DocumentStore
from codeflow.infrastructure.persistence.repositories import (
    SnippetRepository,
    sort_by_recent_activity,
)

FIXED = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_create_persists_snippet(repository, store):
    snippet = await repository.create(
        "  hello ", "print(1)", "python", folder_path=["work"], tags=["demo"]
    )

    assert snippet.title == "hello"
    assert snippet.original_title == "hello"
    assert snippet.code == "print(1)"
    assert snippet.owner_id == "alice"
    assert snippet.folder_path == ["work"]
    assert snippet.tags == ["demo"]
    assert snippet.is_favorite is False

    doc = await store.get("snippets", snippet.id)
    assert doc.get("user_id") == "alice"
    assert doc.get("folder") == "work"
    assert await store.get("folders", "alice:work") is not None


@pytest.mark.asyncio
async def test_create_requires_identity(store):
    repository = SnippetRepository(store, StaticIdentityProvider(None))

    with pytest.raises(UnauthenticatedError):
        await repository.create("t", "", "python")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"title": " ", "code": "", "language": "python"}, InvalidTitleError),
        ({"title": "t", "code": "x" * 11, "language": "python"}, PayloadTooLargeError),
        ({"title": "t", "code": "", "language": "cobol"}, InvalidLanguageError),
    ],
)
async def test_validation_happens_before_store_calls(alice, kwargs, error):
    store = AsyncMock()
    repository = SnippetRepository(store, alice, validator=SnippetValidator(max_code_size=10))

    with pytest.raises(error):
        await repository.create(**kwargs)

    store.count.assert_not_awaited()
    store.add.assert_not_awaited()


@pytest.mark.asyncio
async def test_duplicate_title_gets_timestamp_suffix(store, alice):
    repository = SnippetRepository(store, alice, clock=lambda: FIXED)

    first = await repository.create("scratch", "a", "python")
    second = await repository.create("scratch", "b", "python")
    third = await repository.create("scratch", "c", "python")

    assert first.title == "scratch"
    assert second.title == "scratch (2024-01-01T00-00-00)"
    assert third.title == "scratch (2024-01-01T00-00-00 #2)"
    assert second.original_title == "scratch"


@pytest.mark.asyncio
async def test_same_title_in_other_folder_or_owner_is_kept(repository, bob_repository):
    await repository.create("scratch", "a", "python")

    in_folder = await repository.create("scratch", "b", "python", folder_path=["work"])
    for_bob = await bob_repository.create("scratch", "c", "python")

    assert in_folder.title == "scratch"
    assert for_bob.title == "scratch"


@pytest.mark.asyncio
async def test_quota_is_enforced(store, alice):
    repository = SnippetRepository(store, alice, max_snippets_per_user=1)
    await repository.create("one", "", "python")

    with pytest.raises(QuotaExceededError):
        await repository.create("two", "", "python")


@pytest.mark.asyncio
async def test_get_checks_existence_and_ownership(repository, bob_repository):
    snippet = await repository.create("mine", "", "python")

    assert (await repository.get(snippet.id)).title == "mine"
    with pytest.raises(ForbiddenError):
        await bob_repository.get(snippet.id)
    with pytest.raises(NotFoundError):
        await repository.get("missing")


@pytest.mark.asyncio
async def test_update_overwrites_fields_without_disambiguation(repository):
    await repository.create("taken", "", "python")
    snippet = await repository.create("other", "", "python")

    updated = await repository.update(snippet.id, "taken", "console.log(1)", "javascript")

    assert updated.title == "taken"
    assert updated.code == "console.log(1)"
    assert updated.language == "javascript"
    assert updated.owner_id == "alice"
    assert updated.created_at == snippet.created_at
    assert updated.updated_at > snippet.updated_at


@pytest.mark.asyncio
async def test_update_by_other_user_is_forbidden(repository, bob_repository, store):
    snippet = await repository.create("mine", "x", "python")

    with pytest.raises(ForbiddenError):
        await bob_repository.update(snippet.id, "stolen", "y", "python")

    assert (await store.get("snippets", snippet.id)).get("code") == "x"


@pytest.mark.asyncio
async def test_update_missing_snippet(repository):
    with pytest.raises(NotFoundError):
        await repository.update("missing", "t", "", "python")


@pytest.mark.asyncio
async def test_save_creates_then_updates(repository):
    created = await repository.save(None, "draft", "a", "python", folder_path=["x"])
    updated = await repository.save(created.id, "draft", "b", "python")

    assert updated.id == created.id
    assert updated.code == "b"
    assert updated.folder_path == ["x"]


@pytest.mark.asyncio
async def test_set_favorite(repository):
    snippet = await repository.create("fav", "", "python")

    assert (await repository.set_favorite(snippet.id, True)).is_favorite is True


@pytest.mark.asyncio
async def test_delete(repository, bob_repository, store):
    snippet = await repository.create("gone", "", "python")

    with pytest.raises(ForbiddenError):
        await bob_repository.delete(snippet.id)
    await repository.delete(snippet.id)

    assert await store.get("snippets", snippet.id) is None
    with pytest.raises(NotFoundError):
        await repository.delete(snippet.id)


@pytest.mark.asyncio
async def test_list_by_owner_newest_first(repository, bob_repository):
    first = await repository.create("one", "", "python")
    second = await repository.create("two", "", "python")
    await bob_repository.create("bob's", "", "python")

    snippets = await repository.list_by_owner()

    assert [s.id for s in snippets] == [second.id, first.id]


@pytest.mark.asyncio
async def test_list_by_owner_rejects_other_owner(repository):
    with pytest.raises(ForbiddenError):
        await repository.list_by_owner("bob")


@pytest.mark.asyncio
async def test_list_falls_back_to_client_side_sort(db, clock, alice):
    store = DocumentStore(db, clock=clock, composite_indexes=False)
    repository = SnippetRepository(store, alice)
    older = await repository.create("older", "", "python")
    newer = await repository.create("newer", "", "python")
    await repository.update(older.id, "older", "edited", "python")

    snippets = await repository.list_by_owner()

    assert [s.id for s in snippets] == [older.id, newer.id]


@pytest.mark.asyncio
async def test_legacy_fields_are_readable(repository, store):
    doc = await store.add(
        "snippets",
        {"title": "old", "content": "echo hi", "language": "bash", "userId": "alice"},
    )

    snippet = await repository.get(doc.id)

    assert snippet.code == "echo hi"
    assert snippet.owner_id == "alice"
    assert snippet.folder_path == []


@pytest.mark.asyncio
async def test_update_rewrites_legacy_fields(repository, store):
    doc = await store.add(
        "snippets",
        {"title": "old", "content": "echo hi", "language": "bash", "userId": "alice"},
    )

    await repository.update(doc.id, "old", "echo bye", "bash")

    assert [(s.id, s.code) for s in await repository.list_by_owner()] == [(doc.id, "echo bye")]
    raw = await store.get("snippets", doc.id)
    assert raw.get("user_id") == "alice"
    assert "userId" not in raw.data
    assert "content" not in raw.data


def test_sort_by_recent_activity_is_stable():
    def make(doc_id, created, updated):
        doc = Document("snippets", doc_id, {"user_id": "alice"}, created, updated)
        return SnippetRepository._to_entity(doc)

    t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    later = t.replace(hour=1)
    snippets = [make("x", t, t), make("y", t, later), make("z", t, t)]

    assert [s.id for s in sort_by_recent_activity(snippets)] == ["y", "x", "z"]
