"""User ORM — mirrors the pre-existing `users` table.

Invariants:
    - id is the externally supplied primary key, stored as text
    - username is unique (enforced by the store)
    - password is stored verbatim
    - warnings defaults to 0
"""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from account_service.db.base import Base


class User(Base):
    """A registered account."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    warnings: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
