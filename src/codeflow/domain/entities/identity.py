"""Identity of the signed-in user.

Authentication itself is delegated to a hosted identity provider; the core
only needs a stable user identifier for ownership checks.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Identity:
    """An authenticated user.

    Attributes:
        user_id: Stable identifier issued by the identity provider.
        email: Optional email address.
        display_name: Optional display name.
    """

    user_id: str
    email: str | None = None
    display_name: str | None = None

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValueError("User ID is required")


class IdentityProvider(Protocol):
    """Anything that can report the currently signed-in user."""

    def current_identity(self) -> Identity | None: ...


class StaticIdentityProvider:
    """Identity provider that always reports the same user (or nobody)."""

    def __init__(self, identity: Identity | None) -> None:
        self.identity = identity

    @classmethod
    def for_user(cls, user_id: str) -> "StaticIdentityProvider":
        return cls(Identity(user_id=user_id))

    def current_identity(self) -> Identity | None:
        return self.identity
