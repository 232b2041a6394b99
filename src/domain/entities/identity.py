"""Authenticated identity as issued by the external auth provider."""

from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID

# Metadata keys differ between email sign-up and social logins
DISPLAY_NAME_KEYS = ("display_name", "full_name", "name")
SHORT_NAME_KEYS = ("username", "user_name", "preferred_username")


def _first_present(metadata: dict[str, Any], keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = metadata.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


@dataclass(frozen=True)
class Identity:
    """A signed-in user. Read-only; owned by the auth provider."""

    id: UUID
    email: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    role: Optional[str] = None

    @property
    def display_name(self) -> Optional[str]:
        return _first_present(self.metadata, DISPLAY_NAME_KEYS)

    @property
    def short_name(self) -> Optional[str]:
        return _first_present(self.metadata, SHORT_NAME_KEYS)

    @property
    def email_local_part(self) -> Optional[str]:
        local, _, _ = self.email.partition("@")
        return local.strip() or None
