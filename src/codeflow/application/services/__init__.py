"""Application services."""

from codeflow.application.services.autosave_coordinator import (
    AutosaveCoordinator,
    AutosaveState,
    AutosaveStatus,
    Draft,
)
from codeflow.application.services.editor_controller import (
    CodeExecutor,
    EditorController,
    ExecutionResult,
)
from codeflow.application.services.schema_migration import (
    LegacyFieldMigration,
    MigrationReport,
)

__all__ = [
    "AutosaveCoordinator",
    "AutosaveState",
    "AutosaveStatus",
    "Draft",
    "CodeExecutor",
    "EditorController",
    "ExecutionResult",
    "LegacyFieldMigration",
    "MigrationReport",
]
