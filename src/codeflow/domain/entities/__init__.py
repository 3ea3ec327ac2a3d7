"""Domain entities for CodeFlow.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from codeflow.domain.entities.folder import (
    PATH_SEPARATOR,
    Folder,
    join_path,
    path_prefixes,
    split_path,
)
from codeflow.domain.entities.identity import (
    Identity,
    IdentityProvider,
    StaticIdentityProvider,
)
from codeflow.domain.entities.language import Language, default_code_for
from codeflow.domain.entities.snippet import Snippet

__all__ = [
    "PATH_SEPARATOR",
    "Folder",
    "Identity",
    "IdentityProvider",
    "Language",
    "Snippet",
    "StaticIdentityProvider",
    "default_code_for",
    "join_path",
    "path_prefixes",
    "split_path",
]
