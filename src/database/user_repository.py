"""
User repository - keyed persistence for User rows

Two implementations share the UserRepository interface:
- PostgresUserRepository: asyncpg connection pool, parameterised SQL
- InMemoryUserRepository: dict keyed by id, used for tests and the memory backend
"""

import itertools
import logging
from typing import Any, Dict, List, Optional, Protocol

import asyncpg

from models.user import User, USERS_TABLE, USER_ID_FIELD, USER_WRITABLE_FIELDS, USER_COLUMNS

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the underlying database rejects an operation"""


class UserRepository(Protocol):
    """Persistence interface the users service depends on"""

    def create(self, data: Dict[str, Any]) -> User: ...

    async def save(self, user: User) -> User: ...

    async def find_all(self) -> List[User]: ...

    async def find_by_id(self, user_id: int) -> Optional[User]: ...

    async def update_by_id(self, user_id: int, changes: Dict[str, Any]) -> int: ...

    async def delete_by_id(self, user_id: int) -> int: ...


def _writable(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the columns an update may touch"""
    return {key: value for key, value in changes.items() if key in USER_WRITABLE_FIELDS}


def parse_affected_rows(command_tag: Optional[str]) -> int:
    """Parse an asyncpg command tag such as ``"UPDATE 1"`` or ``"DELETE 0"``"""
    if not command_tag:
        return 0
    try:
        return int(command_tag.split()[-1])
    except ValueError:
        return 0


class PostgresUserRepository:
    """UserRepository backed by an asyncpg pool"""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool
        self._select = f"SELECT {', '.join(USER_COLUMNS)} FROM {USERS_TABLE}"

    def create(self, data: Dict[str, Any]) -> User:
        return User(**_writable(data))

    async def save(self, user: User) -> User:
        values = [getattr(user, name) for name in USER_WRITABLE_FIELDS]

        if user.id is None:
            placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))
            query = f"""
                INSERT INTO {USERS_TABLE} ({', '.join(USER_WRITABLE_FIELDS)})
                VALUES ({placeholders})
                RETURNING {', '.join(USER_COLUMNS)}
            """
            params = values
        else:
            set_parts = [f"{name} = ${i}" for i, name in enumerate(USER_WRITABLE_FIELDS, start=1)]
            query = f"""
                UPDATE {USERS_TABLE} SET {', '.join(set_parts)}
                WHERE {USER_ID_FIELD} = ${len(values) + 1}
                RETURNING {', '.join(USER_COLUMNS)}
            """
            params = values + [user.id]

        row = await self._fetchrow(query, *params)
        if not row:
            raise StoreError(f"Save operation failed - no row returned for user {user.id}")
        return User(**dict(row))

    async def find_all(self) -> List[User]:
        query = f"{self._select} ORDER BY {USER_ID_FIELD}"
        logger.debug(f"Executing READ query: {query}")

        async with self.pool.acquire() as conn:
            try:
                rows = await conn.fetch(query)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error during READ: {e}")
                raise StoreError(f"Database query failed: {e}") from e

        return [User(**dict(row)) for row in rows]

    async def find_by_id(self, user_id: int) -> Optional[User]:
        query = f"{self._select} WHERE {USER_ID_FIELD} = $1"
        row = await self._fetchrow(query, user_id)
        return User(**dict(row)) if row else None

    async def update_by_id(self, user_id: int, changes: Dict[str, Any]) -> int:
        updates = _writable(changes)
        if not updates:
            return 0

        set_parts = [f"{name} = ${i}" for i, name in enumerate(updates, start=1)]
        params = list(updates.values()) + [user_id]
        query = (
            f"UPDATE {USERS_TABLE} SET {', '.join(set_parts)} "
            f"WHERE {USER_ID_FIELD} = ${len(params)}"
        )
        return await self._execute(query, *params)

    async def delete_by_id(self, user_id: int) -> int:
        query = f"DELETE FROM {USERS_TABLE} WHERE {USER_ID_FIELD} = $1"
        return await self._execute(query, user_id)

    async def _fetchrow(self, query: str, *params: Any):
        logger.debug(f"Executing: {query.strip()}")
        logger.debug(f"Parameters: {list(params)}")

        async with self.pool.acquire() as conn:
            try:
                return await conn.fetchrow(query, *params)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error: {e}")
                raise StoreError(f"Database query failed: {e}") from e

    async def _execute(self, query: str, *params: Any) -> int:
        logger.debug(f"Executing: {query}")
        logger.debug(f"Parameters: {list(params)}")

        async with self.pool.acquire() as conn:
            try:
                result = await conn.execute(query, *params)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error: {e}")
                raise StoreError(f"Database statement failed: {e}") from e

        return parse_affected_rows(result)


class InMemoryUserRepository:
    """UserRepository keeping rows in a dict; ids auto-increment from 1"""

    def __init__(self):
        self._rows: Dict[int, User] = {}
        self._ids = itertools.count(1)

    def create(self, data: Dict[str, Any]) -> User:
        return User(**_writable(data))

    async def save(self, user: User) -> User:
        if user.id is None:
            stored = user.model_copy(update={"id": next(self._ids)})
        elif user.id in self._rows:
            stored = user.model_copy()
        else:
            raise StoreError(f"Save operation failed - no row returned for user {user.id}")
        self._rows[stored.id] = stored
        return stored.model_copy()

    async def find_all(self) -> List[User]:
        return [self._rows[key].model_copy() for key in sorted(self._rows)]

    async def find_by_id(self, user_id: int) -> Optional[User]:
        user = self._rows.get(user_id)
        return user.model_copy() if user else None

    async def update_by_id(self, user_id: int, changes: Dict[str, Any]) -> int:
        updates = _writable(changes)
        if not updates or user_id not in self._rows:
            return 0
        self._rows[user_id] = self._rows[user_id].model_copy(update=updates)
        return 1

    async def delete_by_id(self, user_id: int) -> int:
        return 1 if self._rows.pop(user_id, None) is not None else 0
