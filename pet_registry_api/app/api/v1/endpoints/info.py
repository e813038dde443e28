"""
Information endpoint for API v1.

Returns the service name and version together with counters that let
operators see at a glance how much the registry holds.  Public, no
caller identity required.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from pet_registry_api.app.api.deps import get_registry_service
from pet_registry_api.app.services.registry_service import PetRegistryService

router = APIRouter()


@router.get("/", response_model=Dict[str, Any])
async def get_info(
    request: Request,
    registry: PetRegistryService = Depends(get_registry_service),
) -> Dict[str, Any]:
    """Return project name, API version and registry counters.

    ``last_pet_id`` is the most recently allocated identifier; it keeps
    growing after deletions because identifiers are never reused.
    """
    app_settings = request.app.state.settings
    stats = registry.stats()
    return {
        "name": app_settings.project_name,
        "version": app_settings.api_version,
        **stats,
    }
