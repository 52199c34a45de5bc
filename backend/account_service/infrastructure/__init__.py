"""Infrastructure Layer — store access and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from api/
    - All driver errors translated to PersistenceError before leaving this layer
"""
