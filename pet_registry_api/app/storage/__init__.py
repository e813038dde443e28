"""
Durable storage for the registry.

``StableMemory`` splits one SQLite database into segments holding a
``StableCell`` (the identifier counter) or a ``StableMap`` (pets, found
reports).  Records are encoded by ``RecordCodec``.
"""

from .codec import RecordCodec
from .found_report_store import FoundReportStore
from .id_allocator import IdAllocator
from .pet_store import PetStore
from .stable_memory import StableCell, StableMap, StableMemory

__all__ = [
    "FoundReportStore",
    "IdAllocator",
    "PetStore",
    "RecordCodec",
    "StableCell",
    "StableMap",
    "StableMemory",
]
