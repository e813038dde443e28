"""
Business logic for the pet registry.

``PetRegistryService`` owns the pet store, the found-report store and the
identifier allocator for the lifetime of the process.  It is built once
at start-up (``from_database``) and handed to the API layer; nothing in
the package keeps module level store globals.

Rules enforced here:

* descriptive fields, locations and finder names must be non-empty and
  at most ``max_field_length`` characters, must be valid UTF-8, and the
  resulting record must fit its segment size limit (``InvalidInputError``);
* only the owner may update, report lost or delete a pet
  (``NotAuthorizedError``);
* a found report is accepted from anyone, but only for a pet that is
  currently lost (``InvalidInputError`` otherwise).

Checks run in the order existence, input, then ownership or state, and
all of them run before anything is written.  Each mutating call is one
database transaction, so ``report_found`` stores the report and clears
the lost flag together or not at all.

Public methods are serialized by a re-entrant lock, which keeps the
single-writer model intact when the host dispatches requests from
several threads.
"""

from __future__ import annotations

import functools
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, TypeVar

from ..core.clock import Clock, system_clock
from ..core.config import Settings
from ..core.constants import COUNTER_SEGMENT, FOUND_REPORT_SEGMENT, PET_SEGMENT
from ..core.db import Database
from ..core.exceptions import InvalidInputError, NotAuthorizedError, NotFoundError, RecordTooLargeError
from ..schemas.pet import (
    FoundPetReportPayload,
    FoundReport,
    LostPetPayload,
    PetPayload,
    PetRecord,
    PetState,
)
from ..storage.codec import RecordCodec
from ..storage.found_report_store import FoundReportStore
from ..storage.id_allocator import IdAllocator
from ..storage.pet_store import PetStore
from ..storage.stable_memory import StableMemory

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _serialized(method: Callable[..., T]) -> Callable[..., T]:
    @functools.wraps(method)
    def wrapper(self: "PetRegistryService", *args, **kwargs) -> T:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class PetRegistryService:
    """Register pets and drive them through the lost/found workflow."""

    def __init__(
        self,
        database: Database,
        pets: PetStore,
        found_reports: FoundReportStore,
        ids: IdAllocator,
        clock: Clock = system_clock,
        max_field_length: int = 256,
    ) -> None:
        self.database = database
        self.pets = pets
        self.found_reports = found_reports
        self.ids = ids
        self.clock = clock
        self.max_field_length = max_field_length
        self._lock = threading.RLock()

    @classmethod
    def from_database(
        cls,
        database: Database,
        app_settings: Settings,
        clock: Optional[Clock] = None,
    ) -> "PetRegistryService":
        """Lay out the counter, pet and found-report segments on ``database``."""
        memory = StableMemory(database)
        ids = IdAllocator(memory.cell(COUNTER_SEGMENT, initial=0))
        pets = PetStore(memory.map(PET_SEGMENT, RecordCodec(PetRecord, app_settings.pet_record_max_bytes)))
        found_reports = FoundReportStore(
            memory.map(FOUND_REPORT_SEGMENT, RecordCodec(FoundReport, app_settings.found_report_max_bytes))
        )
        return cls(
            database,
            pets,
            found_reports,
            ids,
            clock=clock or system_clock,
            max_field_length=app_settings.max_field_length,
        )

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------
    def _require_text(self, field: str, value: str) -> str:
        if not value or not value.strip():
            raise InvalidInputError(f"{field} must not be empty")
        if len(value) > self.max_field_length:
            raise InvalidInputError(f"{field} must be at most {self.max_field_length} characters")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidInputError(f"{field} is not valid UTF-8 text") from exc
        return value

    @staticmethod
    @contextmanager
    def _within_record_limit() -> Iterator[None]:
        # Field limits count characters while segments count encoded bytes,
        # so multibyte text can still overflow a record.
        try:
            yield
        except RecordTooLargeError as exc:
            raise InvalidInputError(
                f"{exc.type_name} would be {exc.size} bytes, at most {exc.max_size} bytes can be stored"
            ) from exc

    def _check_pet_payload(self, payload: PetPayload) -> None:
        self._require_text("name", payload.name)
        self._require_text("breed", payload.breed)
        self._require_text("color", payload.color)
        self._require_text("photo_reference", payload.photo_reference)

    def _load(self, pet_id: int) -> PetRecord:
        pet = self.pets.get(pet_id)
        if pet is None:
            raise NotFoundError(f"Pet with id {pet_id} not found")
        return pet

    @staticmethod
    def _require_owner(pet: PetRecord, caller: str) -> None:
        if pet.owner != caller:
            raise NotAuthorizedError("You are not the owner")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    @_serialized
    def register(self, payload: PetPayload, caller: str) -> PetRecord:
        """Create a pet owned by ``caller``; the new id comes from the allocator."""
        self._check_pet_payload(payload)
        self._require_text("caller", caller)
        with self.database.transaction(), self._within_record_limit():
            pet = PetRecord(
                id=self.ids.next(),
                name=payload.name,
                breed=payload.breed,
                color=payload.color,
                photo_reference=payload.photo_reference,
                owner=caller,
                is_lost=False,
                lost_location=None,
                created_at=self.clock(),
                updated_at=None,
            )
            self.pets.save(pet)
        logger.info("Caller %s registered pet %s (%s)", caller, pet.id, pet.name)
        return pet

    @_serialized
    def update_info(self, pet_id: int, payload: PetPayload, caller: str) -> PetRecord:
        """Replace the descriptive fields of an owned pet."""
        pet = self._load(pet_id)
        self._check_pet_payload(payload)
        self._require_owner(pet, caller)
        updated = pet.model_copy(
            update={
                "name": payload.name,
                "breed": payload.breed,
                "color": payload.color,
                "photo_reference": payload.photo_reference,
                "updated_at": self.clock(),
            }
        )
        with self.database.transaction(), self._within_record_limit():
            self.pets.save(updated)
        logger.info("Caller %s updated pet %s", caller, pet_id)
        return updated

    @_serialized
    def report_lost(self, pet_id: int, payload: LostPetPayload, caller: str) -> PetRecord:
        """Mark an owned pet as lost.

        Reporting a pet that is already lost is allowed and replaces the
        recorded location.
        """
        pet = self._load(pet_id)
        self._require_text("lost_location", payload.lost_location)
        self._require_owner(pet, caller)
        updated = pet.model_copy(
            update={
                "is_lost": True,
                "lost_location": payload.lost_location,
                "updated_at": self.clock(),
            }
        )
        with self.database.transaction(), self._within_record_limit():
            self.pets.save(updated)
        logger.info("Caller %s reported pet %s lost at %s", caller, pet_id, payload.lost_location)
        return updated

    @_serialized
    def report_found(self, pet_id: int, payload: FoundPetReportPayload, caller: str) -> PetRecord:
        """Record a sighting of a lost pet and mark it available again.

        Any caller may report a found pet.  The report replaces any earlier
        report for the same pet.
        """
        pet = self._load(pet_id)
        self._require_text("finder_name", payload.finder_name)
        self._require_text("found_location", payload.found_location)
        if pet.state is not PetState.LOST:
            raise InvalidInputError("Pet is not reported as lost")
        now = self.clock()
        report = FoundReport(
            pet_id=pet_id,
            finder_name=payload.finder_name,
            found_location=payload.found_location,
            created_at=now,
        )
        updated = pet.model_copy(update={"is_lost": False, "lost_location": None, "updated_at": now})
        with self.database.transaction(), self._within_record_limit():
            # Report first: if the pet write fails the whole transaction is
            # rolled back, and a stray report would be harmless anyway.
            self.found_reports.save(report)
            self.pets.save(updated)
        logger.info("Caller %s reported pet %s found at %s", caller, pet_id, payload.found_location)
        return updated

    @_serialized
    def delete(self, pet_id: int, caller: str) -> str:
        """Remove an owned pet.  Its found report, if any, is kept."""
        pet = self._load(pet_id)
        self._require_owner(pet, caller)
        with self.database.transaction():
            self.pets.remove(pet_id)
        logger.info("Caller %s deleted pet %s", caller, pet_id)
        return f"Pet with id {pet_id} deleted"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @_serialized
    def get(self, pet_id: int) -> Optional[PetRecord]:
        return self.pets.get(pet_id)

    @_serialized
    def list_all(self) -> List[PetRecord]:
        return self.pets.list_all()

    @_serialized
    def get_found_report(self, pet_id: int) -> Optional[FoundReport]:
        return self.found_reports.get(pet_id)

    @_serialized
    def stats(self) -> Dict[str, int]:
        """Counts of stored pets and reports plus the last allocated id."""
        pets = self.pets.list_all()
        return {
            "pets": len(self.pets),
            "lost_pets": sum(1 for pet in pets if pet.is_lost),
            "found_reports": len(self.found_reports),
            "last_pet_id": self.ids.current(),
        }
