"""Debounced autosave for the editor.

The coordinator tracks the draft being edited and turns bursts of edits
into a single write once the user has been idle for the debounce window.

State machine::

    idle --change--> pending --quiet window--> saving --ok--> idle
                     ^   |                        |
                     +---+ change (restart)       +--error--> pending (no timer)

Only one autosave write is in flight at a time: edits that arrive while
saving re-arm the timer once that write settles. Manual saves bypass the
timer and are not serialized against an in-flight autosave.

The displayed status (saving / saved / unsaved / None) is separate from
the state machine; "saved" decays back to None after a short delay.
"""

import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable

from codeflow.core.config import Settings
from codeflow.core.exceptions import CodeFlowError
from codeflow.core.logging import get_logger
from codeflow.domain.entities.snippet import Snippet
from codeflow.infrastructure.persistence.repositories.snippet_repository import (
    SnippetRepository,
)

logger = get_logger(__name__)

FALLBACK_TITLE = "Untitled"


class AutosaveState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"


class AutosaveStatus(str, Enum):
    SAVING = "saving"
    SAVED = "saved"
    UNSAVED = "unsaved"


@dataclass
class Draft:
    """Content currently open in the editor."""

    snippet_id: str | None = None
    title: str = ""
    code: str = ""
    language: str = "javascript"
    folder_path: list[str] = field(default_factory=list)


class AutosaveCoordinator:
    """Debounces draft changes into snippet writes.

    Must be used from within a running event loop.

    Args:
        repository: Repository used for create-or-update writes.
        debounce_seconds: Quiet window after the last change.
        status_reset_seconds: How long the "saved" status stays visible.
        enabled: Whether autosave starts enabled.
        on_saved: Called with every snippet persisted by this coordinator.
    """

    def __init__(
        self,
        repository: SnippetRepository,
        debounce_seconds: float = 2.0,
        status_reset_seconds: float = 2.0,
        enabled: bool = True,
        on_saved: Callable[[Snippet], None] | None = None,
    ) -> None:
        self.repository = repository
        self.debounce_seconds = debounce_seconds
        self.status_reset_seconds = status_reset_seconds
        self.on_saved = on_saved
        self.draft = Draft()
        self._enabled = enabled
        self._state = AutosaveState.IDLE
        self._status: AutosaveStatus | None = None
        self._timer: asyncio.Task[None] | None = None
        self._inflight: asyncio.Task[None] | None = None
        self._status_reset: asyncio.Task[None] | None = None
        self._changed_while_saving = False
        # bumped whenever a different draft is loaded, so a late write
        # never binds its id to the wrong draft
        self._generation = 0

    @classmethod
    def from_settings(
        cls,
        repository: SnippetRepository,
        settings: Settings,
        on_saved: Callable[[Snippet], None] | None = None,
    ) -> "AutosaveCoordinator":
        return cls(
            repository,
            debounce_seconds=settings.autosave_debounce_seconds,
            status_reset_seconds=settings.autosave_status_reset_seconds,
            enabled=settings.autosave_enabled_by_default,
            on_saved=on_saved,
        )

    @property
    def state(self) -> AutosaveState:
        return self._state

    @property
    def status(self) -> AutosaveStatus | None:
        return self._status

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def snippet_id(self) -> str | None:
        return self.draft.snippet_id

    def track(
        self,
        *,
        code: str | None = None,
        language: str | None = None,
        title: str | None = None,
    ) -> None:
        """Record an edit to the draft and (re)start the debounce timer."""
        changed = False
        if code is not None and code != self.draft.code:
            self.draft.code = code
            changed = True
        if language is not None and language != self.draft.language:
            self.draft.language = language
            changed = True
        if title is not None and title != self.draft.title:
            self.draft.title = title
            changed = True
        if changed:
            self._on_change()

    def bind(self, snippet: Snippet) -> None:
        """Load a persisted snippet as the current draft."""
        self._load(
            Draft(
                snippet_id=snippet.id,
                title=snippet.title,
                code=snippet.code,
                language=snippet.language,
                folder_path=list(snippet.folder_path),
            )
        )

    def reset(self, code: str = "", language: str | None = None) -> None:
        """Start a new, never-saved draft."""
        self._load(Draft(code=code, language=language or self.draft.language))

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable autosave.

        Disabling drops a pending timer but never cancels a write that is
        already in flight.
        """
        self._enabled = enabled
        if not enabled:
            self._cancel(self._timer)
            self._timer = None
            if self._state is AutosaveState.PENDING:
                self._state = AutosaveState.IDLE
        logger.debug("Autosave toggled", enabled=enabled)

    async def save_now(self) -> Snippet:
        """Persist the draft immediately, bypassing the debounce timer.

        Unlike autosave, an empty title is not replaced with a fallback and
        failures are raised to the caller.
        """
        self._cancel(self._timer)
        self._timer = None
        if self._state is AutosaveState.PENDING:
            self._state = AutosaveState.IDLE

        snapshot = replace(self.draft, folder_path=list(self.draft.folder_path))
        generation = self._generation
        self._set_status(AutosaveStatus.SAVING)
        try:
            snippet = await self.repository.save(
                snapshot.snippet_id,
                snapshot.title,
                snapshot.code,
                snapshot.language,
                folder_path=snapshot.folder_path,
            )
        except CodeFlowError:
            self._set_status(AutosaveStatus.UNSAVED)
            raise
        self._settled(snippet, generation)
        return snippet

    async def wait_idle(self) -> None:
        """Wait until no timer is armed and no autosave write is in flight."""
        while True:
            task = self._timer or self._inflight
            if task is None:
                return
            await asyncio.wait({task})

    async def aclose(self) -> None:
        """Cancel timers and wait for an in-flight write to settle."""
        self._cancel(self._timer)
        self._cancel(self._status_reset)
        self._timer = None
        self._status_reset = None
        if self._inflight is not None:
            await asyncio.wait({self._inflight})

    def _qualifies(self) -> bool:
        return self._enabled and bool(self.draft.snippet_id or self.draft.title.strip())

    def _on_change(self) -> None:
        if not self._qualifies():
            return
        self._set_status(AutosaveStatus.UNSAVED)
        if self._state is AutosaveState.SAVING:
            self._changed_while_saving = True
            return
        self._arm()

    def _arm(self) -> None:
        self._cancel(self._timer)
        self._state = AutosaveState.PENDING
        self._timer = asyncio.get_running_loop().create_task(self._debounce())

    async def _debounce(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._inflight, self._timer = self._timer, None
        try:
            await self._flush()
        finally:
            self._inflight = None

    async def _flush(self) -> None:
        self._state = AutosaveState.SAVING
        self._changed_while_saving = False
        self._set_status(AutosaveStatus.SAVING)
        snapshot = replace(self.draft, folder_path=list(self.draft.folder_path))
        generation = self._generation

        try:
            snippet = await self.repository.save(
                snapshot.snippet_id,
                snapshot.title.strip() or FALLBACK_TITLE,
                snapshot.code,
                snapshot.language,
                folder_path=snapshot.folder_path,
            )
        except CodeFlowError as exc:
            logger.warning(
                "Autosave failed",
                snippet_id=snapshot.snippet_id,
                error=exc.message,
            )
            self._write_failed(generation)
            return
        except Exception as e:
            logger.error(
                "Autosave failed unexpectedly",
                snippet_id=snapshot.snippet_id,
                error=str(e),
                exc_info=True,
            )
            self._write_failed(generation)
            return

        self._state = AutosaveState.IDLE
        try:
            self._settled(snippet, generation)
        except Exception as e:
            logger.error(
                "Autosave callback failed",
                snippet_id=snippet.id,
                error=str(e),
                exc_info=True,
            )
        self._rearm_if_changed()

    def _write_failed(self, generation: int) -> None:
        # no automatic retry: the next edit or a manual save re-arms
        if generation == self._generation:
            self._state = AutosaveState.PENDING
            self._set_status(AutosaveStatus.UNSAVED)
        else:
            self._state = AutosaveState.IDLE
        self._rearm_if_changed()

    def _rearm_if_changed(self) -> None:
        if self._changed_while_saving and self._qualifies():
            self._set_status(AutosaveStatus.UNSAVED)
            self._arm()

    def _settled(self, snippet: Snippet, generation: int) -> None:
        logger.info("Draft saved", snippet_id=snippet.id)
        if generation == self._generation:
            if self.draft.snippet_id is None:
                self.draft.snippet_id = snippet.id
            self._set_status(AutosaveStatus.SAVED)
            self._cancel(self._status_reset)
            self._status_reset = asyncio.get_running_loop().create_task(
                self._decay_saved_status()
            )
        if self.on_saved is not None:
            self.on_saved(snippet)

    async def _decay_saved_status(self) -> None:
        await asyncio.sleep(self.status_reset_seconds)
        if self._status is AutosaveStatus.SAVED:
            self._status = None

    def _set_status(self, status: AutosaveStatus | None) -> None:
        if status is not AutosaveStatus.SAVED:
            self._cancel(self._status_reset)
            self._status_reset = None
        self._status = status

    def _load(self, draft: Draft) -> None:
        self._cancel(self._timer)
        self._timer = None
        self._generation += 1
        self._changed_while_saving = False
        self.draft = draft
        if self._state is not AutosaveState.SAVING:
            self._state = AutosaveState.IDLE
        self._set_status(None)

    @staticmethod
    def _cancel(task: asyncio.Task[None] | None) -> None:
        if task is not None and not task.done():
            task.cancel()
