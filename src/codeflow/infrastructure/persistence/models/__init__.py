"""SQLAlchemy models for CodeFlow.

All models inherit from the Base class defined in database.py.
"""

from codeflow.infrastructure.persistence.models.document import DocumentModel

__all__ = [
    "DocumentModel",
]
