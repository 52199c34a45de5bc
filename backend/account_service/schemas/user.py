"""User Schemas — Pydantic models for the user creation and listing endpoints.

Invariants:
    - UserCreate accepts absent fields; presence is checked by missing_fields()
      so a missing field yields the documented 400 body, not a Pydantic error
    - id accepts a JSON string or integer and is echoed back as sent
    - warnings: null or omitted means 0
    - UserRecord carries exactly the four listed fields
"""

from pydantic import BaseModel, field_validator

from account_service.core.domain_types import REQUIRED_USER_FIELDS


class UserCreate(BaseModel):
    """User creation body — fields are optional at parse time."""
    id: str | int | None = None
    username: str | None = None
    password: str | None = None
    warnings: int = 0

    @field_validator("warnings", mode="before")
    @classmethod
    def default_null_warnings(cls, v):
        return 0 if v is None else v

    def missing_fields(self) -> list[str]:
        """Names of required fields that are absent, null or empty."""
        return [
            name for name in REQUIRED_USER_FIELDS
            if getattr(self, name) is None or getattr(self, name) == ""
        ]


class UserCreated(BaseModel):
    """201 body for a created account."""
    message: str = "Account created successfully"
    userId: str | int


class UserRecord(BaseModel):
    """One row of the users listing."""
    id: str
    username: str
    password: str
    warnings: int
