"""
Users service - CRUD for users with existence checks
"""

import logging
from typing import Any, Dict, List

from database.connection import get_user_repository
from database.user_repository import UserRepository
from models.user import User
from services.base_service import BaseService

logger = logging.getLogger(__name__)


class UsersService(BaseService[UserRepository]):
    """Service for user management operations

    Store failures are never caught here; they reach the caller unchanged.
    """

    def __init__(self, repository: UserRepository):
        super().__init__("User", repository)

    async def find_all(self) -> List[User]:
        return await self.repository.find_all()

    async def create(self, data: Dict[str, Any]) -> User:
        """
        Create a new user

        Args:
            data: Field values, ``firstname`` and ``lastname``

        Returns:
            The persisted user including its assigned id
        """
        entity = self.repository.create(data)
        user = await self.repository.save(entity)
        logger.info(f"Created user {user.id}")
        return user

    async def find_one(self, user_id: int) -> User:
        """
        Get a user by its ID

        Raises:
            NotFoundError: no user has this id
        """
        user = await self.repository.find_by_id(user_id)
        return self._require(user, user_id)

    async def update(self, user_id: int, data: Dict[str, Any]) -> User:
        """
        Apply a partial update, then re-read the user

        Only the keys present in ``data`` are written. A failure of the
        update call itself propagates untranslated; NotFoundError comes
        from the re-read.

        Raises:
            NotFoundError: no user has this id after the update
        """
        if data:
            affected = await self.repository.update_by_id(user_id, data)
            logger.info(f"Updated user {user_id}: {affected} row(s) affected")

        user = await self.repository.find_by_id(user_id)
        return self._require(user, user_id)

    async def remove(self, user_id: int) -> None:
        """Delete a user. Deleting an id that does not exist is not an error."""
        affected = await self.repository.delete_by_id(user_id)
        if affected == 0:
            logger.warning(f"Delete requested for missing user {user_id}")
        else:
            logger.info(f"Deleted user {user_id}")


def get_users_service() -> UsersService:
    """Build the users service over the active repository"""
    return UsersService(get_user_repository())
