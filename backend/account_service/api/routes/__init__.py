"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter
    - Routes never build SQL (delegate to the persistence gateway)
"""
