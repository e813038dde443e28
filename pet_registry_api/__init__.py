"""
Top-level package for the Pet Registry API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``pet_registry_api.app.main:app``.
"""

__all__ = []
