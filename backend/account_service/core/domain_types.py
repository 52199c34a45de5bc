"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps the externally supplied identifier as text
    - Store failures are classified into exactly three FailureKind values
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)


# ─── Enums ───────────────────────────────────────────────────────

class FailureKind(str, Enum):
    """How the persistence gateway classifies a store failure."""
    CONFLICT = "conflict"      # uniqueness constraint violated
    TRANSIENT = "transient"    # connectivity, pool timeout, lock wait
    FATAL = "fatal"            # anything else


# ─── Values ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class NewUser:
    """A row about to be inserted into the users table."""
    id: UserId
    username: str
    password: str
    warnings: int = 0


REQUIRED_USER_FIELDS: tuple[str, ...] = ("id", "username", "password")
MASKED_PASSWORD = "********"
