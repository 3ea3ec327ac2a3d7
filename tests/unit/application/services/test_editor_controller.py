"""Tests for EditorController wired to a real repository."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from codeflow.application.services.autosave_coordinator import AutosaveStatus
from codeflow.application.services.editor_controller import (
    EditorController,
    ExecutionResult,
)
from codeflow.core.exceptions import (
    EmptyCodeError,
    ExecutionUnavailableError,
    InvalidTitleError,
    RateLimitExceededError,
    UnauthenticatedError,
)
from codeflow.domain.entities.identity import StaticIdentityProvider
from codeflow.domain.entities.language import default_code_for
from codeflow.infrastructure.persistence.repositories import SnippetRepository


@pytest.fixture
def executor():
    executor = AsyncMock()
    executor.execute.return_value = ExecutionResult(output="Hello, World!", execution_time_ms=12)
    return executor


@pytest_asyncio.fixture
async def controller(repository, settings, executor):
    controller = EditorController(repository, settings, executor=executor)
    yield controller
    await controller.aclose()


@pytest.mark.asyncio
async def test_starts_with_default_template(controller):
    assert controller.language == "javascript"
    assert controller.code == default_code_for("javascript")
    assert controller.title == ""
    assert controller.selected_snippet_id is None
    assert controller.autosave_status is None


@pytest.mark.asyncio
async def test_run_rejects_empty_code(controller, executor):
    controller.edit_code("   \n")

    with pytest.raises(EmptyCodeError):
        await controller.run()

    executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_run_without_executor(repository, settings):
    controller = EditorController(repository, settings)

    with pytest.raises(ExecutionUnavailableError):
        await controller.run()


@pytest.mark.asyncio
async def test_run_shows_output(controller, executor):
    result = await controller.run()

    executor.execute.assert_awaited_once_with(controller.code, "javascript")
    assert result.output == "Hello, World!"
    assert controller.output == "Hello, World!"
    assert controller.is_error is False
    assert controller.execution_time_ms == 12


@pytest.mark.asyncio
async def test_run_shows_errors(controller, executor):
    executor.execute.return_value = ExecutionResult(
        output="", error="SyntaxError: Unexpected token", is_compile_error=True
    )

    await controller.run()

    assert controller.output == "SyntaxError: Unexpected token"
    assert controller.is_error is True
    assert controller.execution_time_ms is not None


@pytest.mark.asyncio
async def test_run_is_rate_limited(repository, settings, executor):
    limited = settings.model_copy(update={"max_executions_per_minute": 2})
    controller = EditorController(repository, limited, executor=executor)

    await controller.run()
    await controller.run()
    with pytest.raises(RateLimitExceededError):
        await controller.run()

    assert executor.execute.await_count == 2


@pytest.mark.asyncio
async def test_hourly_rejection_does_not_consume_minute_budget(repository, settings, executor):
    limited = settings.model_copy(
        update={"max_executions_per_minute": 3, "max_executions_per_hour": 2}
    )
    controller = EditorController(repository, limited, executor=executor)

    await controller.run()
    await controller.run()
    with pytest.raises(RateLimitExceededError):
        await controller.run()

    assert executor.execute.await_count == 2
    # two recorded attempts leave room for a third in the minute window
    assert controller.rate_limiter.check("alice:minute", 3, 60) is True


@pytest.mark.asyncio
async def test_save_requires_title(controller, repository):
    with pytest.raises(InvalidTitleError):
        await controller.save()

    assert await repository.list_by_owner() == []


@pytest.mark.asyncio
async def test_save_requires_sign_in(store, settings):
    repository = SnippetRepository(store, StaticIdentityProvider(None))
    controller = EditorController(repository, settings)

    with pytest.raises(UnauthenticatedError):
        await controller.save("t")


@pytest.mark.asyncio
async def test_save_persists_and_selects(controller):
    snippet = await controller.save("greeting")

    assert snippet.title == "greeting"
    assert snippet.code == default_code_for("javascript")
    assert controller.selected_snippet_id == snippet.id
    assert controller.autosave_status is AutosaveStatus.SAVED
    assert [s.id for s in controller.snippets] == [snippet.id]


@pytest.mark.asyncio
async def test_select_loads_snippet(controller, repository):
    snippet = await repository.create("py", "print(1)", "python")
    await controller.run()

    await controller.select(snippet.id)

    assert controller.selected_snippet_id == snippet.id
    assert controller.code == "print(1)"
    assert controller.language == "python"
    assert controller.title == "py"
    assert controller.output == ""


@pytest.mark.asyncio
async def test_delete_selected_resets_editor(controller, repository):
    snippet = await repository.create("py", "print(1)", "python")
    await controller.load_snippets()
    await controller.select(snippet.id)

    await controller.delete(snippet.id)

    assert controller.snippets == []
    assert controller.selected_snippet_id is None
    assert controller.code == default_code_for("python")
    assert controller.title == ""


@pytest.mark.asyncio
async def test_delete_other_snippet_keeps_selection(controller, repository):
    kept = await repository.create("kept", "", "python")
    other = await repository.create("other", "", "python")
    await controller.load_snippets()
    await controller.select(kept.id)

    await controller.delete(other.id)

    assert controller.selected_snippet_id == kept.id
    assert [s.id for s in controller.snippets] == [kept.id]


@pytest.mark.asyncio
async def test_load_snippets_replaces_cache(controller, repository):
    first = await repository.create("one", "", "python")
    second = await repository.create("two", "", "python")

    snippets = await controller.load_snippets()

    assert [s.id for s in snippets] == [second.id, first.id]
    assert controller.snippets == snippets


@pytest.mark.asyncio
async def test_edits_are_autosaved_into_cache(controller, repository):
    controller.rename("draft")
    controller.change_language("python")
    controller.edit_code("print(1)")

    await controller.autosave.wait_idle()

    assert controller.selected_snippet_id is not None
    assert controller.snippets[0].code == "print(1)"
    stored = await repository.get(controller.selected_snippet_id)
    assert stored.language == "python"
    assert stored.title == "draft"


@pytest.mark.asyncio
async def test_autosave_can_be_disabled(controller, repository):
    controller.set_autosave_enabled(False)
    controller.rename("draft")

    await controller.autosave.wait_idle()

    assert await repository.list_by_owner() == []


@pytest.mark.asyncio
async def test_new_snippet_uses_current_language(controller, repository):
    snippet = await repository.create("go", "package main", "go")
    await controller.select(snippet.id)

    controller.new_snippet()

    assert controller.selected_snippet_id is None
    assert controller.code == default_code_for("go")
