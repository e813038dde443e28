"""
Service layer.

``PetRegistryService`` encapsulates the registry's business rules on top
of the storage layer so API handlers stay thin.
"""
