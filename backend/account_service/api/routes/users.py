"""Users — account creation and the full account listing.

Invariants:
    - POST /api/user checks presence of id, username, password before any insert
    - A conflict from the gateway becomes 409; any other store failure becomes 500
    - GET /api/users returns every row in store order, no filtering or paging
    - Routes only look at FailureKind, never at driver error codes
"""

import logging

from fastapi import APIRouter, Depends, status

from account_service.api.dependencies import get_app_settings, get_user_gateway
from account_service.config import Settings
from account_service.core.domain_types import (
    FailureKind, MASKED_PASSWORD, NewUser, UserId,
)
from account_service.core.errors import (
    AccountCreationError, DuplicateUserError, ErrorContext,
    MissingFieldsError, PersistenceError, UserListingError,
)
from account_service.core.repository_protocols import UserRepository
from account_service.schemas.user import UserCreate, UserCreated, UserRecord

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["users"])


@router.post(
    "/user", response_model=UserCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate | None = None,
    gateway: UserRepository = Depends(get_user_gateway),
):
    """Create an account from id, username, password and optional warnings."""
    body = body or UserCreate()
    missing = body.missing_fields()
    if missing:
        raise MissingFieldsError(missing)

    user_id = UserId(str(body.id))
    try:
        await gateway.insert_user(NewUser(
            id=user_id,
            username=body.username,
            password=body.password,
            warnings=body.warnings,
        ))
    except PersistenceError as e:
        ctx = ErrorContext(user_id=user_id, debug_info={"kind": e.kind.value})
        if e.kind is FailureKind.CONFLICT:
            raise DuplicateUserError(ctx) from e
        raise AccountCreationError(ctx) from e

    return UserCreated(userId=body.id)


@router.get("/users", response_model=list[UserRecord])
async def list_users(
    gateway: UserRepository = Depends(get_user_gateway),
    settings: Settings = Depends(get_app_settings),
):
    """List every account with id, username, password and warnings."""
    try:
        users = await gateway.list_users()
    except PersistenceError as e:
        raise UserListingError(
            ErrorContext(debug_info={"kind": e.kind.value}),
        ) from e

    if settings.mask_passwords:
        users = [
            u.model_copy(update={"password": MASKED_PASSWORD}) for u in users
        ]
    return users
