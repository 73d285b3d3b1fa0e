"""Credential registry — pure operations over an in-memory snapshot.

The registry is an ordered tuple of users; no two entries share an email.
Persisting a snapshot is the caller's responsibility.
"""

import json
import logging

from domain.model.errors import StorageError
from domain.model.user import User

logger = logging.getLogger(__name__)

Registry = tuple[User, ...]


def find_match(registry: Registry, email: str, password: str) -> User | None:
    """Return the first user whose email and password both match exactly."""
    for user in registry:
        if user.email == email and user.password == password:
            return user
    return None


def is_email_taken(registry: Registry, email: str) -> bool:
    return any(user.email == email for user in registry)


def append(registry: Registry, user: User) -> Registry:
    """Return a new registry with ``user`` added at the end."""
    return (*registry, user)


def serialize(registry: Registry) -> str:
    return json.dumps([user.to_dict() for user in registry])


def deserialize(raw: str | None) -> Registry:
    """Parse a stored registry record. A missing record is an empty registry."""
    if not raw:
        return ()
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("registry record is not a list")
        return tuple(User.from_dict(item) for item in data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        logger.error("Failed to parse user registry", extra={"error": str(e)})
        raise StorageError("Failed to load user data") from e
