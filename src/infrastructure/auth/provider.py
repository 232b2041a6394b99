"""Authentication provider protocol."""

from typing import Optional, Protocol

from domain.entities.identity import Identity


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[Identity]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            Identity if valid, None if invalid
        """
        ...

    def create_token(self, identity: Identity) -> str:
        """
        Create an authentication token for an identity.

        Args:
            identity: The identity to create a token for

        Returns:
            The generated token string
        """
        ...
