"""Domain services for CodeFlow.

Services contain business logic that doesn't naturally fit within a single entity.
They have no dependencies on infrastructure or external frameworks.
"""

from codeflow.domain.services.rate_limiter import RateLimiter
from codeflow.domain.services.snippet_validator import SnippetValidator
from codeflow.domain.services.title_disambiguator import (
    disambiguate_title,
    format_title_suffix,
)

__all__ = [
    "RateLimiter",
    "SnippetValidator",
    "disambiguate_title",
    "format_title_suffix",
]
