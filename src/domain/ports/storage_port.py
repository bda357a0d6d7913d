"""
Storage Port - Interface for user watchlist and portfolio persistence.
"""

from abc import ABC, abstractmethod

from src.domain.entities.user import UserRecord


class UserStorePort(ABC):
    """
    Port interface for user record storage.

    Implementations:
        - DynamoDBUserStore: AWS DynamoDB storage
        - JSONUserStore: Local JSON file storage for development
    """

    @abstractmethod
    async def get_user(self, user_id: str) -> UserRecord:
        """
        Retrieve a user's record.

        Args:
            user_id: Opaque user id from the identity provider

        Returns:
            The stored UserRecord.

        Raises:
            UserNotFoundError: If no record exists.
        """
        ...

    @abstractmethod
    async def save_user(self, record: UserRecord) -> None:
        """
        Replace the stored record of a user.

        Args:
            record: UserRecord to store
        """
        ...

    @abstractmethod
    async def create_user(self, user_id: str) -> UserRecord:
        """
        Create an empty record (no-op returning the existing one if present).

        Args:
            user_id: Opaque user id

        Returns:
            The stored UserRecord.
        """
        ...
