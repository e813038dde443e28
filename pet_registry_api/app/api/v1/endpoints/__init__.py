"""
Endpoint subpackage for API v1.

Each module defines an APIRouter for one area (pets, info); they are
aggregated in ``router.py``.
"""
