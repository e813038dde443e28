"""Persistent allocator of pet identifiers."""

from __future__ import annotations

import logging

from ..core.constants import U64_MAX
from ..core.exceptions import CounterError, StorageError
from .stable_memory import StableCell

logger = logging.getLogger(__name__)


class IdAllocator:
    """Monotonic counter backed by a ``StableCell``.

    ``next`` returns the incremented value, so with the default initial
    value of 0 the first identifier handed out is 1.  Identifiers are
    never reused, including those of deleted pets.
    """

    def __init__(self, cell: StableCell) -> None:
        self._cell = cell

    def current(self) -> int:
        """Return the last allocated identifier (0 if none yet)."""
        return self._cell.get()

    def next(self) -> int:
        try:
            with self._cell.database.transaction():
                current = self._cell.get()
                if current >= U64_MAX:
                    raise CounterError("Identifier counter is exhausted")
                new_value = current + 1
                self._cell.set(new_value)
        except CounterError:
            raise
        except StorageError as exc:
            # Continuing without a durable counter could hand out the same
            # identifier twice after a restart.
            raise CounterError(f"Cannot increment ID counter: {exc}") from exc
        logger.debug("Allocated identifier %s", new_value)
        return new_value
