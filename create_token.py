"""Print a bearer token for the given caller identity.

Usage:
    python create_token.py alice@example.com [lifetime_seconds]
"""
import sys

from pet_registry_api.app.core.security import create_access_token

subject = sys.argv[1] if len(sys.argv) > 1 else "owner@example.com"
# срок действия по умолчанию 365 дней (секунды)
lifetime = int(sys.argv[2]) if len(sys.argv) > 2 else 365 * 24 * 60 * 60
print(create_access_token({"sub": subject}, expires_delta=lifetime))
