"""Persistent map of pet identifier to its latest ``FoundReport``.

Only one report is kept per pet: saving a report for a pet that already
has one replaces it.  Reports are not removed when their pet is deleted.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from ..schemas.pet import FoundReport
from .stable_memory import StableMap


class FoundReportStore:
    def __init__(self, entries: StableMap[FoundReport]) -> None:
        self._entries = entries

    def get(self, pet_id: int) -> Optional[FoundReport]:
        return self._entries.get(pet_id)

    def save(self, report: FoundReport) -> Optional[FoundReport]:
        return self._entries.insert(report.pet_id, report)

    def __iter__(self) -> Iterator[FoundReport]:
        for _, report in self._entries.iterate():
            yield report

    def list_all(self) -> List[FoundReport]:
        return list(self)

    def __len__(self) -> int:
        return len(self._entries)
