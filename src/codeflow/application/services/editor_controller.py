"""Editor page controller.

Holds the user-visible editor state (code, language, title, selected
snippet, snippet list, run output) and wires user actions to the snippet
repository and the autosave coordinator. Remote code execution is
delegated to an injected ``CodeExecutor``.
"""

import time
from dataclasses import dataclass
from typing import Protocol

from codeflow.core.config import Settings
from codeflow.core.exceptions import (
    EmptyCodeError,
    ExecutionUnavailableError,
    InvalidTitleError,
    RateLimitExceededError,
    UnauthenticatedError,
)
from codeflow.core.logging import get_logger
from codeflow.domain.entities.language import default_code_for
from codeflow.domain.entities.snippet import Snippet
from codeflow.domain.services.rate_limiter import RateLimiter
from codeflow.application.services.autosave_coordinator import (
    AutosaveCoordinator,
    AutosaveStatus,
)
from codeflow.infrastructure.persistence.repositories.snippet_repository import (
    SnippetRepository,
)

logger = get_logger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of running code on the remote execution service."""

    output: str
    error: str | None = None
    execution_time_ms: int | None = None
    is_compile_error: bool = False


class CodeExecutor(Protocol):
    async def execute(self, code: str, language: str) -> ExecutionResult: ...


class EditorController:
    """Orchestrates the editor page.

    The snippet list is a read-through cache: saves and deletes patch it
    immediately and the next successful ``load_snippets`` replaces it.
    """

    def __init__(
        self,
        repository: SnippetRepository,
        settings: Settings,
        executor: CodeExecutor | None = None,
        rate_limiter: RateLimiter | None = None,
        coordinator: AutosaveCoordinator | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings
        self.executor = executor
        self.rate_limiter = rate_limiter or RateLimiter()
        self.autosave = coordinator or AutosaveCoordinator.from_settings(repository, settings)
        self.autosave.on_saved = self._remember

        self.snippets: list[Snippet] = []
        self.output = ""
        self.is_error = False
        self.execution_time_ms: int | None = None
        self.autosave.reset(
            code=default_code_for(settings.default_language),
            language=settings.default_language,
        )

    @property
    def code(self) -> str:
        return self.autosave.draft.code

    @property
    def language(self) -> str:
        return self.autosave.draft.language

    @property
    def title(self) -> str:
        return self.autosave.draft.title

    @property
    def selected_snippet_id(self) -> str | None:
        return self.autosave.snippet_id

    @property
    def autosave_status(self) -> AutosaveStatus | None:
        return self.autosave.status

    async def load_snippets(self) -> list[Snippet]:
        self.snippets = await self.repository.list_by_owner()
        return self.snippets

    def edit_code(self, code: str) -> None:
        self.autosave.track(code=code)

    def change_language(self, language: str) -> None:
        self.autosave.track(language=language)

    def rename(self, title: str) -> None:
        self.autosave.track(title=title)

    def set_autosave_enabled(self, enabled: bool) -> None:
        self.autosave.set_enabled(enabled)

    async def run(self) -> ExecutionResult:
        """Execute the current code.

        Raises:
            EmptyCodeError: The editor is empty.
            RateLimitExceededError: Too many executions in the last minute or hour.
            ExecutionUnavailableError: No executor is configured.
        """
        if not self.code.strip():
            raise EmptyCodeError()
        if self.executor is None:
            raise ExecutionUnavailableError()

        identity = self.repository.identity_provider.current_identity()
        user_key = identity.user_id if identity is not None else "anonymous"
        if not self.rate_limiter.check_many(
            [
                (f"{user_key}:minute", self.settings.max_executions_per_minute, 60),
                (f"{user_key}:hour", self.settings.max_executions_per_hour, 3600),
            ]
        ):
            raise RateLimitExceededError("Too many executions. Please wait before running again.")

        self.output = ""
        self.is_error = False
        self.execution_time_ms = None
        started = time.perf_counter()
        result = await self.executor.execute(self.code, self.language)
        if result.execution_time_ms is None:
            result.execution_time_ms = round((time.perf_counter() - started) * 1000)

        self.output = result.error or result.output
        self.is_error = result.error is not None
        self.execution_time_ms = result.execution_time_ms
        logger.info(
            "Code executed",
            language=self.language,
            is_error=self.is_error,
            execution_time_ms=self.execution_time_ms,
        )
        return result

    async def save(self, title: str | None = None) -> Snippet:
        """Manually save the current draft.

        Args:
            title: Title to save under; defaults to the current title.

        Raises:
            UnauthenticatedError: No user is signed in.
            InvalidTitleError: There is no title to save under.
        """
        if self.repository.identity_provider.current_identity() is None:
            raise UnauthenticatedError("Please sign in to save snippets")
        if title is not None:
            self.autosave.draft.title = title.strip()
        if not self.title.strip():
            raise InvalidTitleError("Please enter a title for this snippet")
        return await self.autosave.save_now()

    async def select(self, snippet_id: str) -> Snippet:
        snippet = await self.repository.get(snippet_id)
        self.autosave.bind(snippet)
        self._clear_output()
        self._remember(snippet)
        return snippet

    async def delete(self, snippet_id: str) -> None:
        await self.repository.delete(snippet_id)
        self.snippets = [s for s in self.snippets if s.id != snippet_id]
        if self.selected_snippet_id == snippet_id:
            self.new_snippet()

    def new_snippet(self) -> None:
        self.autosave.reset(code=default_code_for(self.language), language=self.language)
        self._clear_output()

    async def aclose(self) -> None:
        await self.autosave.aclose()

    def _clear_output(self) -> None:
        self.output = ""
        self.is_error = False
        self.execution_time_ms = None

    def _remember(self, snippet: Snippet) -> None:
        for index, cached in enumerate(self.snippets):
            if cached.id == snippet.id:
                self.snippets[index] = snippet
                return
        self.snippets.insert(0, snippet)
