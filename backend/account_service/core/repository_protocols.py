"""Boundary Protocols — contracts between the endpoints and the persistence gateway.

Invariants:
    - Routes depend on UserRepository, never on the concrete gateway class
    - Implementations translate every store failure into PersistenceError
    - Implementations provided via dependency injection (app.state + get_user_gateway)
"""

from typing import TYPE_CHECKING, Protocol

from account_service.core.domain_types import NewUser, UserId

if TYPE_CHECKING:
    from account_service.schemas.user import UserRecord


class UserRepository(Protocol):
    """Contract for user persistence — implemented by infrastructure.UserGateway."""
    async def insert_user(self, user: NewUser) -> UserId: ...
    async def list_users(self) -> list["UserRecord"]: ...
    async def health_check(self) -> bool: ...
