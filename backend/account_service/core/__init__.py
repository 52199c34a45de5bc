"""Core Layer — domain types and the error hierarchy, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from api/, infrastructure/, or db/
"""
