"""Current identity management using ContextVars.

The signed-in user is stored per task context, so concurrent editor
sessions running on the same event loop never see each other's identity.
Components do not read this directly; they receive a
``ContextIdentityProvider`` by injection.
"""

from contextvars import ContextVar
from typing import Optional

from codeflow.domain.entities.identity import Identity

_current_identity: ContextVar[Optional[Identity]] = ContextVar(
    "current_identity", default=None
)


def get_current_identity() -> Optional[Identity]:
    """Get the identity bound to the current context, if any."""
    return _current_identity.get()


def set_current_identity(identity: Identity) -> None:
    """Bind an identity to the current context."""
    _current_identity.set(identity)


def clear_current_identity() -> None:
    """Clear the identity bound to the current context."""
    _current_identity.set(None)


class ContextIdentityProvider:
    """Identity provider backed by the current context variable."""

    def current_identity(self) -> Optional[Identity]:
        return get_current_identity()
