"""Tests for FolderPathResolver."""

from unittest.mock import AsyncMock

import pytest

from codeflow.infrastructure.persistence.repositories import FolderPathResolver


@pytest.fixture
def resolver(store):
    return FolderPathResolver(store)


def test_folder_id_is_namespaced_by_owner():
    assert FolderPathResolver.folder_id("alice", ["a", "b"]) == "alice:a/b"


@pytest.mark.asyncio
async def test_ensure_path_creates_every_prefix_once(resolver, store):
    created = await resolver.ensure_path(["a", "b", "c"], "alice")

    assert created == ["alice:a", "alice:a/b", "alice:a/b/c"]
    assert await store.count("folders") == 3

    assert await resolver.ensure_path(["a", "b", "c"], "alice") == []
    assert await store.count("folders") == 3


@pytest.mark.asyncio
async def test_ensure_path_creates_only_missing_prefixes(resolver):
    await resolver.ensure_path(["a"], "alice")

    assert await resolver.ensure_path(["a", "b"], "alice") == ["alice:a/b"]


@pytest.mark.asyncio
async def test_same_path_for_different_owners(resolver):
    await resolver.ensure_path(["work"], "alice")

    assert await resolver.ensure_path(["work"], "bob") == ["bob:work"]


@pytest.mark.asyncio
async def test_owner_free_path_key_is_stored(resolver, store):
    await resolver.ensure_path(["work"], "alice")
    await resolver.ensure_path(["work"], "bob")

    alice_doc = await store.get("folders", "alice:work")
    bob_doc = await store.get("folders", "bob:work")

    assert alice_doc.get("path_key") == bob_doc.get("path_key") == "work"
    assert (alice_doc.get("user_id"), bob_doc.get("user_id")) == ("alice", "bob")


@pytest.mark.asyncio
async def test_folder_documents_carry_path_and_owner(resolver):
    await resolver.ensure_path(["work", "python"], "alice")

    folder = await resolver.get_folder(["work", "python"], "alice")

    assert folder.name == "python"
    assert folder.path == ["work", "python"]
    assert folder.path_key == "work/python"
    assert folder.owner_id == "alice"
    assert await resolver.get_folder(["work", "python"], "bob") is None


@pytest.mark.asyncio
async def test_list_folders_sorted_by_path(resolver):
    await resolver.ensure_path(["b"], "alice")
    await resolver.ensure_path(["a", "z"], "alice")
    await resolver.ensure_path(["c"], "bob")

    folders = await resolver.list_folders("alice")

    assert [f.path for f in folders] == [["a"], ["a", "z"], ["b"]]


@pytest.mark.asyncio
async def test_existing_path_never_commits_a_batch():
    store = AsyncMock()
    store.get.return_value = object()
    resolver = FolderPathResolver(store)

    assert await resolver.ensure_path(["a", "b"], "alice") == []
    store.batch_commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_path_is_a_no_op():
    store = AsyncMock()
    resolver = FolderPathResolver(store)

    assert await resolver.ensure_path([], "alice") == []
    store.get.assert_not_awaited()
    store.batch_commit.assert_not_awaited()
