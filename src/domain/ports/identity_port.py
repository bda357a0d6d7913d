"""
Identity Port - Interface for resolving bearer tokens to user ids.
"""

from abc import ABC, abstractmethod


class IdentityPort(ABC):
    """
    Port interface for authentication.

    Implementations:
        - JWTIdentityAdapter: Verifies HS256 signed tokens
    """

    @abstractmethod
    def resolve_user_id(self, token: str) -> str:
        """
        Verify a bearer token.

        Args:
            token: Raw token without the "Bearer " prefix

        Returns:
            Opaque user id.

        Raises:
            AuthenticationError: If the token is missing, invalid or expired.
        """
        ...
