"""Persistent map of pet identifier to ``PetRecord``."""

from __future__ import annotations

from typing import Iterator, List, Optional

from ..schemas.pet import PetRecord
from .stable_memory import StableMap


class PetStore:
    """Pet records keyed by ``PetRecord.id``."""

    def __init__(self, entries: StableMap[PetRecord]) -> None:
        self._entries = entries

    def get(self, pet_id: int) -> Optional[PetRecord]:
        return self._entries.get(pet_id)

    def save(self, pet: PetRecord) -> Optional[PetRecord]:
        """Insert or replace ``pet``; returns the stored version it replaced."""
        return self._entries.insert(pet.id, pet)

    def remove(self, pet_id: int) -> Optional[PetRecord]:
        return self._entries.remove(pet_id)

    def __iter__(self) -> Iterator[PetRecord]:
        for _, pet in self._entries.iterate():
            yield pet

    def list_all(self) -> List[PetRecord]:
        return list(self)

    def __len__(self) -> int:
        return len(self._entries)
