"""Database Infrastructure — SQLAlchemy declarative Base.

Invariants:
    - The users table is owned by the store; the service never creates or migrates it
"""
