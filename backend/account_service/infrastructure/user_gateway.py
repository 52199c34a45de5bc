"""User Gateway — the two parameterized statements the endpoints need.

Invariants:
    - One statement per call, one pooled connection borrowed for its duration
    - Failures surface only as PersistenceError (see database.py)
    - The gateway never creates or alters the users table
    - A NULL warnings column (written by older clients) lists as 0
"""

import logging

from sqlalchemy import insert, select

from account_service.core.domain_types import NewUser, UserId
from account_service.infrastructure.database import DatabaseSessionManager
from account_service.models.user import User
from account_service.schemas.user import UserRecord

logger = logging.getLogger(__name__)


class UserGateway:
    """Reads and writes rows of the users table."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def insert_user(self, user: NewUser) -> UserId:
        async with self._db.session("insert") as session:
            await session.execute(
                insert(User).values(
                    id=user.id,
                    username=user.username,
                    password=user.password,
                    warnings=user.warnings,
                ),
            )
            await session.commit()
        logger.info("User created", extra={"user_id": user.id})
        return user.id

    async def list_users(self) -> list[UserRecord]:
        async with self._db.session("select") as session:
            result = await session.execute(
                select(User.id, User.username, User.password, User.warnings),
            )
            rows = result.all()
        return [
            UserRecord(
                id=row.id, username=row.username,
                password=row.password, warnings=row.warnings or 0,
            )
            for row in rows
        ]

    async def health_check(self) -> bool:
        return await self._db.health_check()
