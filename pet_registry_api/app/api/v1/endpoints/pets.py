"""
Pet endpoints for API v1.

Reads (listing, single pet, found report) are public.  Every mutation
needs a caller identity; ownership and lost/found rules are enforced by
``PetRegistryService`` and its errors are turned into HTTP responses by
the application's exception handlers.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from pet_registry_api.app.api.deps import get_registry_service
from pet_registry_api.app.core.constants import U64_MAX
from pet_registry_api.app.core.security import get_caller_identity
from pet_registry_api.app.schemas.pet import (
    DeleteConfirmation,
    FoundPetReportPayload,
    FoundReport,
    LostPetPayload,
    PetPayload,
    PetRecord,
)
from pet_registry_api.app.services.registry_service import PetRegistryService

router = APIRouter()

PetId = Annotated[int, Path(ge=0, le=U64_MAX, description="Pet identifier")]


@router.post("/", response_model=PetRecord, status_code=status.HTTP_201_CREATED)
async def register_pet(
    payload: PetPayload,
    caller: str = Depends(get_caller_identity),
    registry: PetRegistryService = Depends(get_registry_service),
) -> PetRecord:
    """Register a new pet owned by the caller."""
    return registry.register(payload, caller)


@router.get("/", response_model=List[PetRecord])
async def list_pets(
    registry: PetRegistryService = Depends(get_registry_service),
) -> List[PetRecord]:
    """Return every registered pet in identifier order."""
    return registry.list_all()


@router.get("/{pet_id}", response_model=PetRecord)
async def get_pet(
    pet_id: PetId,
    registry: PetRegistryService = Depends(get_registry_service),
) -> PetRecord:
    pet = registry.get(pet_id)
    if pet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Pet with id {pet_id} not found")
    return pet


@router.put("/{pet_id}", response_model=PetRecord)
async def update_pet(
    payload: PetPayload,
    pet_id: PetId,
    caller: str = Depends(get_caller_identity),
    registry: PetRegistryService = Depends(get_registry_service),
) -> PetRecord:
    """Replace name, breed, color and photo of a pet (owner only)."""
    return registry.update_info(pet_id, payload, caller)


@router.post("/{pet_id}/lost", response_model=PetRecord)
async def report_lost(
    payload: LostPetPayload,
    pet_id: PetId,
    caller: str = Depends(get_caller_identity),
    registry: PetRegistryService = Depends(get_registry_service),
) -> PetRecord:
    """Mark a pet as lost (owner only).  Repeating the call updates the location."""
    return registry.report_lost(pet_id, payload, caller)


@router.post("/{pet_id}/found", response_model=PetRecord)
async def report_found(
    payload: FoundPetReportPayload,
    pet_id: PetId,
    caller: str = Depends(get_caller_identity),
    registry: PetRegistryService = Depends(get_registry_service),
) -> PetRecord:
    """Report a lost pet as found.  Open to any authenticated caller."""
    return registry.report_found(pet_id, payload, caller)


@router.delete("/{pet_id}", response_model=DeleteConfirmation)
async def delete_pet(
    pet_id: PetId,
    caller: str = Depends(get_caller_identity),
    registry: PetRegistryService = Depends(get_registry_service),
) -> DeleteConfirmation:
    """Delete a pet (owner only).  Found reports for it are kept."""
    return DeleteConfirmation(msg=registry.delete(pet_id, caller))


@router.get("/{pet_id}/found-report", response_model=FoundReport)
async def get_found_report(
    pet_id: PetId,
    registry: PetRegistryService = Depends(get_registry_service),
) -> FoundReport:
    """Return the latest found report for a pet, which may since have been deleted."""
    report = registry.get_found_report(pet_id)
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No found report for pet with id {pet_id}",
        )
    return report
