"""Infrastructure layer - External dependencies and implementations.

This layer contains the SQLAlchemy-backed document store and the
repositories built on it. It implements the persistence needs of the
application and domain layers.
"""

from codeflow.infrastructure.persistence.database import (
    Base,
    DatabaseManager,
    close_database,
    get_db_manager,
    init_database,
)

__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_manager",
    "init_database",
    "close_database",
]
