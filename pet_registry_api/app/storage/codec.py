"""
Bounded, self-describing record encoding.

Every stored value is a UTF-8 JSON envelope::

    {"type": "PetRecord", "v": 1, "data": {...}}

``type`` names the pydantic model, ``v`` the envelope format version and
``data`` the model's JSON dump.  Unknown keys inside ``data`` are ignored
on decode, so records written by a newer release that only added fields
stay readable.  Anything that cannot be turned back into a valid model is
reported as ``StorageCorruptionError``; nothing is ever skipped silently.
"""

from __future__ import annotations

import json
from typing import Generic, Type, TypeVar

from pydantic import BaseModel

from ..core.exceptions import RecordTooLargeError, StorageCorruptionError

FORMAT_VERSION = 1

M = TypeVar("M", bound=BaseModel)


class RecordCodec(Generic[M]):
    """Encode and decode one model type with a size limit."""

    def __init__(self, model: Type[M], max_size: int) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.model = model
        self.max_size = max_size

    @property
    def type_name(self) -> str:
        return self.model.__name__

    def encode(self, record: M) -> bytes:
        if not isinstance(record, self.model):
            raise TypeError(f"Expected {self.type_name}, got {type(record).__name__}")
        envelope = {
            "type": self.type_name,
            "v": FORMAT_VERSION,
            "data": record.model_dump(mode="json"),
        }
        raw = json.dumps(envelope, ensure_ascii=False, separators=(",", ":"), sort_keys=True).encode("utf-8")
        if len(raw) > self.max_size:
            raise RecordTooLargeError(self.type_name, len(raw), self.max_size)
        return raw

    def decode(self, raw: bytes) -> M:
        try:
            envelope = json.loads(bytes(raw).decode("utf-8"))
        except ValueError as exc:
            raise StorageCorruptionError(f"Stored {self.type_name} is not valid JSON: {exc}") from exc
        if not isinstance(envelope, dict) or "data" not in envelope:
            raise StorageCorruptionError(f"Stored {self.type_name} has no record envelope")
        if envelope.get("type") != self.type_name:
            raise StorageCorruptionError(
                f"Expected a stored {self.type_name}, found {envelope.get('type')!r}"
            )
        version = envelope.get("v")
        if not isinstance(version, int) or version < 1:
            raise StorageCorruptionError(f"Stored {self.type_name} has invalid format version {version!r}")
        try:
            return self.model.model_validate(envelope["data"])
        except ValueError as exc:
            raise StorageCorruptionError(f"Stored {self.type_name} failed validation: {exc}") from exc
