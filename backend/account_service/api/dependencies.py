"""Route Dependencies — hand lifespan-built objects to request handlers.

Invariants:
    - Settings and the user gateway live on app.state, set by create_app/lifespan
    - Tests replace either through app.dependency_overrides
"""

from fastapi import Request

from account_service.config import Settings
from account_service.core.repository_protocols import UserRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_gateway(request: Request) -> UserRepository:
    """The gateway built by the application lifespan."""
    gateway = getattr(request.app.state, "user_gateway", None)
    if gateway is None:
        raise RuntimeError("User gateway not initialized")
    return gateway
