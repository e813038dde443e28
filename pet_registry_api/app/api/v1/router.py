"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.  When
new endpoints are added, update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import info, pets

router = APIRouter()

router.include_router(pets.router, prefix="/pets", tags=["pets"])
router.include_router(info.router, prefix="/info", tags=["info"])
