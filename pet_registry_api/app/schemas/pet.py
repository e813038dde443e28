"""
Pydantic models for pet records and found reports.

``PetRecord`` and ``FoundReport`` are both the stored records and the API
response bodies.  The ``*Payload`` classes describe request bodies; they
only check types, content rules (non-empty, length) are enforced by
``PetRegistryService`` so that every caller gets the same answer.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..core.constants import U64_MAX


class PetState(str, Enum):
    """Position of a pet on the lost/found axis."""

    AVAILABLE = "available"
    LOST = "lost"


class PetPayload(BaseModel):
    """Descriptive fields supplied on register and update."""

    name: str = Field(..., examples=["Rex"])
    breed: str = Field(..., examples=["Labrador"])
    color: str = Field(..., examples=["Brown"])
    photo_reference: str = Field(..., examples=["https://example.com/photos/rex.jpg"])


class LostPetPayload(BaseModel):
    lost_location: str = Field(..., examples=["Central Park"])


class FoundPetReportPayload(BaseModel):
    finder_name: str = Field(..., examples=["Bob"])
    found_location: str = Field(..., examples=["5th Ave"])


class PetRecord(BaseModel):
    """A registered pet.

    ``lost_location`` is set exactly when ``is_lost`` is true; a record
    breaking that rule is rejected, which also catches damaged data on
    read.  Timestamps are nanoseconds since the Unix epoch.
    """

    id: int = Field(..., ge=0, le=U64_MAX)
    name: str
    breed: str
    color: str
    photo_reference: str
    owner: str
    is_lost: bool = False
    lost_location: Optional[str] = None
    created_at: int = Field(..., ge=0)
    updated_at: Optional[int] = Field(None, ge=0)

    model_config = {
        "from_attributes": True,
    }

    @model_validator(mode="after")
    def check_lost_location(self) -> "PetRecord":
        if (self.lost_location is not None) != self.is_lost:
            raise ValueError("lost_location must be set if and only if the pet is lost")
        return self

    @property
    def state(self) -> PetState:
        return PetState.LOST if self.is_lost else PetState.AVAILABLE


class FoundReport(BaseModel):
    """The most recent sighting reported for a pet."""

    pet_id: int = Field(..., ge=0, le=U64_MAX)
    finder_name: str
    found_location: str
    created_at: int = Field(..., ge=0)

    model_config = {
        "from_attributes": True,
    }


class DeleteConfirmation(BaseModel):
    msg: str = Field(..., examples=["Pet with id 1 deleted"])
