from collections.abc import Callable

from loguru import logger

from ewallet_ums.entities.core.user.entity import User
from ewallet_ums.entities.core.user.repository import UserRepository
from ewallet_ums.entities.core.user.schemas import (
    CreateUserRequest,
    UpdateUserRequest,
    UserFilter,
    UserPage,
)

PasswordHasher = Callable[[str], str]


class UserManagementService:
    """Maps request DTOs onto the user repository.

    Password hashing is delegated to the injected ``hash_password`` callable.
    """

    def __init__(self, user_repo: UserRepository, hash_password: PasswordHasher):
        self._user_repo = user_repo
        self._hash_password = hash_password

    async def register_user(self, request: CreateUserRequest) -> User:
        user = request.to_user(self._hash_password(request.password))
        return await self._user_repo.create(user)

    async def update_user(self, user_id: int, request: UpdateUserRequest) -> User:
        """Apply the fields the caller sent onto the current record.

        Raises NotFoundError when the user does not exist or was deleted,
        either before the merge or between the read and the write.
        """
        current = await self._user_repo.get_by_id(user_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            changes["email"] = str(changes["email"])
        if not changes:
            logger.debug("No changes requested for user {}", user_id)
            return current

        merged = current.model_copy(update=changes)
        return await self._user_repo.update(merged)

    async def list_users(self, user_filter: UserFilter) -> UserPage:
        """One page of users plus the total number matching the same filter."""
        items = await self._user_repo.list(user_filter)
        total = await self._user_repo.count(user_filter.without_pagination())
        return UserPage(
            items=items,
            total=total,
            limit=user_filter.limit,
            offset=user_filter.offset,
        )
