"""
Pydantic schema definitions.

The stored records (``PetRecord``, ``FoundReport``) double as API
response bodies; request bodies are separate ``*Payload`` models.
"""
