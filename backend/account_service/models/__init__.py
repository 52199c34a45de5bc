"""ORM Models — SQLAlchemy declarative models for all domain entities.

Design Decisions:
    - All models imported here so Base.metadata is complete once the package loads
"""

from account_service.models.user import User  # noqa: F401
