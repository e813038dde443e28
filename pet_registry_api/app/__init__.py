"""
Application package initializer.

The registry is organised in layers:

* ``core`` — configuration, logging, the SQLite database, caller
  identity and the error taxonomy;
* ``storage`` — segmented key-value storage, the identifier allocator
  and the pet and found-report stores built on it;
* ``services`` — ``PetRegistryService``, the business rules;
* ``schemas`` — pydantic models for records and request bodies;
* ``api`` — versioned FastAPI routers and exception handlers.
"""

from .main import app  # noqa: F401
