"""User data-access layer over the shared connection pool."""

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

import sqlalchemy as sa
from loguru import logger
from sqlalchemy import exc, text
from sqlalchemy.engine import Row

from ewallet_ums.core.errors import (
    DatabaseConnectionError,
    NotFoundError,
    PersistenceError,
)
from ewallet_ums.core.services.database.db_session import DatabaseService
from ewallet_ums.entities.core.user.entity import User
from ewallet_ums.entities.core.user.query import (
    NOT_DELETED,
    USER_COLUMNS,
    build_count_query,
    build_list_query,
)
from ewallet_ums.entities.core.user.schemas import UserFilter
from ewallet_ums.entities.core.user.table import UserTable

T = TypeVar("T")

# Result typing keyed by column name, so every driver hands back datetimes and booleans
_RESULT_TYPES: dict[str, sa.types.TypeEngine] = {
    column.name: column.type for column in UserTable.__table__.columns
}

_INSERT_USER = text(
    """
    INSERT INTO users (email, phone, full_name, password_hash, is_active, is_verified)
    VALUES (:email, :phone, :full_name, :password_hash, :is_active, :is_verified)
    RETURNING id, created_at, updated_at
    """
).columns(
    id=_RESULT_TYPES["id"],
    created_at=_RESULT_TYPES["created_at"],
    updated_at=_RESULT_TYPES["updated_at"],
)

_UPDATE_USER = text(
    f"""
    UPDATE users
    SET email = :email, phone = :phone, full_name = :full_name,
        is_active = :is_active, is_verified = :is_verified,
        updated_at = CURRENT_TIMESTAMP
    WHERE id = :id AND {NOT_DELETED}
    RETURNING updated_at
    """
).columns(updated_at=_RESULT_TYPES["updated_at"])

_SOFT_DELETE_USER = text(
    f"UPDATE users SET deleted_at = CURRENT_TIMESTAMP WHERE id = :id AND {NOT_DELETED}"
)


def _select_user_by(column: str) -> sa.TextClause:
    return _typed(
        text(f"SELECT {USER_COLUMNS} FROM users WHERE {column} = :value AND {NOT_DELETED}")
    )


def _typed(statement: sa.TextClause) -> sa.TextClause:
    # Keyword types are matched to result columns by name, not position
    return statement.columns(**_RESULT_TYPES)


def _to_user(row: Row) -> User:
    return User.model_validate(dict(row._mapping))


class UserRepository:
    """Create, read, update, soft-delete and filtered listing of users.

    Every operation borrows one connection for one statement. ``timeout``
    (seconds) bounds the round trip; it defaults to the repository-wide value
    and ``None`` means no bound beyond the caller's own cancellation.
    """

    def __init__(self, database: DatabaseService, timeout: float | None = None) -> None:
        self._database = database
        self._timeout = timeout

    async def _run(
        self, operation: str, call: Awaitable[T], timeout: float | None
    ) -> T:
        limit = timeout if timeout is not None else self._timeout
        try:
            if limit is None:
                return await call
            return await asyncio.wait_for(call, limit)
        except TimeoutError as e:
            logger.error("Timed out after {}s during {}", limit, operation)
            raise PersistenceError(f"failed to {operation}: timed out after {limit}s") from e
        except (exc.SQLAlchemyError, DatabaseConnectionError, OSError) as e:
            logger.error("Failed to {}: {}", operation, e)
            raise PersistenceError(f"failed to {operation}: {e}") from e

    async def create(self, user: User, *, timeout: float | None = None) -> User:
        """Insert ``user`` and copy the store-assigned id and timestamps back onto it."""

        async def _insert() -> Row:
            async with self._database.begin() as conn:
                result = await conn.execute(
                    _INSERT_USER,
                    {
                        "email": user.email,
                        "phone": user.phone,
                        "full_name": user.full_name,
                        "password_hash": user.password_hash,
                        "is_active": user.is_active,
                        "is_verified": user.is_verified,
                    },
                )
                return result.one()

        row = await self._run("create user", _insert(), timeout)
        user.id = row.id
        user.created_at = row.created_at
        user.updated_at = row.updated_at
        logger.info("User created successfully with ID: {}", user.id)
        return user

    async def _get_one(
        self, column: str, value: Any, timeout: float | None
    ) -> User | None:
        async def _select() -> Row | None:
            async with self._database.connect() as conn:
                result = await conn.execute(_select_user_by(column), {"value": value})
                return result.first()

        row = await self._run(f"get user by {column}", _select(), timeout)
        return _to_user(row) if row is not None else None

    async def get_by_id(self, user_id: int, *, timeout: float | None = None) -> User:
        user = await self._get_one("id", user_id, timeout)
        if user is None:
            logger.debug("User with ID {} not found", user_id)
            raise NotFoundError(f"user {user_id} not found")
        return user

    async def get_by_email(self, email: str, *, timeout: float | None = None) -> User:
        user = await self._get_one("email", email, timeout)
        if user is None:
            logger.debug("User with email {} not found", email)
            raise NotFoundError(f"user with email {email} not found")
        return user

    async def get_by_phone(self, phone: str, *, timeout: float | None = None) -> User:
        user = await self._get_one("phone", phone, timeout)
        if user is None:
            logger.debug("User with phone {} not found", phone)
            raise NotFoundError(f"user with phone {phone} not found")
        return user

    async def _execute_write(
        self,
        operation: str,
        statement: sa.TextClause,
        params: dict[str, Any],
        timeout: float | None,
    ) -> int:
        async def _write() -> int:
            async with self._database.begin() as conn:
                result = await conn.execute(statement, params)
                return result.rowcount

        return await self._run(operation, _write(), timeout)

    async def update(self, user: User, *, timeout: float | None = None) -> User:
        """Overwrite the mutable fields of the live row with ``user.id``.

        The store-assigned ``updated_at`` is copied back onto ``user``.
        """

        async def _update() -> Row | None:
            async with self._database.begin() as conn:
                result = await conn.execute(
                    _UPDATE_USER,
                    {
                        "id": user.id,
                        "email": user.email,
                        "phone": user.phone,
                        "full_name": user.full_name,
                        "is_active": user.is_active,
                        "is_verified": user.is_verified,
                    },
                )
                return result.first()

        row = await self._run(f"update user {user.id}", _update(), timeout)
        if row is None:
            logger.warning("Update skipped: user {} not found", user.id)
            raise NotFoundError(f"user {user.id} not found")

        user.updated_at = row.updated_at
        logger.info("User {} updated successfully", user.id)
        return user

    async def delete(self, user_id: int, *, timeout: float | None = None) -> None:
        """Soft delete: stamp ``deleted_at`` so the row disappears from every query."""
        affected = await self._execute_write(
            f"delete user {user_id}", _SOFT_DELETE_USER, {"id": user_id}, timeout
        )
        if affected == 0:
            logger.warning("Delete skipped: user {} not found", user_id)
            raise NotFoundError(f"user {user_id} not found")

        logger.info("User {} deleted successfully", user_id)

    async def list(
        self, user_filter: UserFilter | None = None, *, timeout: float | None = None
    ) -> list[User]:
        query = build_list_query(user_filter or UserFilter())

        async def _select() -> list[Row]:
            async with self._database.connect() as conn:
                result = await conn.execute(_typed(text(query.sql)), query.params)
                return list(result.all())

        rows = await self._run("list users", _select(), timeout)
        return [_to_user(row) for row in rows]

    async def count(
        self, user_filter: UserFilter | None = None, *, timeout: float | None = None
    ) -> int:
        query = build_count_query(user_filter or UserFilter())

        async def _select() -> int:
            async with self._database.connect() as conn:
                result = await conn.execute(text(query.sql), query.params)
                return int(result.scalar_one())

        return await self._run("count users", _select(), timeout)
