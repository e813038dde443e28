"""
Error taxonomy for the registry.

Two families live here:

``RegistryError``
    Business rule violations returned to the caller.  Each subclass
    carries a human readable ``msg`` and a stable ``code`` used in API
    error bodies.  They never indicate damage to stored data.

``StorageError``
    Fatal problems in the persistence layer (undecodable record, oversized
    record, counter that cannot be advanced).  The current operation is
    aborted; the API layer logs them and answers with a generic 500.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for business rule violations."""

    code = "registry_error"
    status_code = 400

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg

    def to_dict(self) -> dict:
        """Convert to the ``error`` object of an API response."""
        return {"code": self.code, "message": self.msg}


class NotFoundError(RegistryError):
    """The referenced pet does not exist."""

    code = "not_found"
    status_code = 404


class NotAuthorizedError(RegistryError):
    """The caller is not the owner of the pet it tries to mutate."""

    code = "not_authorized"
    status_code = 403


class InvalidInputError(RegistryError):
    """An empty or oversized field, or a request against the wrong lost/found state."""

    code = "invalid_input"
    status_code = 400


class StorageError(Exception):
    """Base class for fatal persistence failures."""


class StorageCorruptionError(StorageError):
    """A stored value could not be decoded back into a record."""


class RecordTooLargeError(StorageError):
    """An encoded record exceeds the size bound of its segment."""

    def __init__(self, type_name: str, size: int, max_size: int) -> None:
        super().__init__(
            f"Encoded {type_name} is {size} bytes, segment limit is {max_size} bytes"
        )
        self.type_name = type_name
        self.size = size
        self.max_size = max_size


class CounterError(StorageError):
    """The identifier counter could not be advanced or persisted."""
