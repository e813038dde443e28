"""FastAPI dependencies shared by the v1 endpoints."""

from fastapi import HTTPException, Request, status

from pet_registry_api.app.services.registry_service import PetRegistryService


def get_registry_service(request: Request) -> PetRegistryService:
    """Return the registry service created at application start-up."""
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Registry is not initialised",
        )
    return registry
