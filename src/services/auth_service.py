"""Auth service — registry persistence and credential operations.

Pure business logic over a KeyValueStore with no session state.
Raises domain errors that the session records and re-raises.
"""

import logging
import os

from domain.model import registry
from domain.model.errors import AuthenticationError, DuplicateUserError
from domain.model.registry import Registry
from domain.model.user import Credentials, SignupData, User
from port.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)

USERS_KEY = os.getenv('AUTH_USERS_KEY', '@auth_users')


async def load_registry(store: KeyValueStore, users_key: str = USERS_KEY) -> Registry:
    """Read the registry snapshot. Raises StorageError if unreadable."""
    return registry.deserialize(await store.get(users_key))


async def save_registry(store: KeyValueStore, users: Registry, users_key: str = USERS_KEY) -> None:
    await store.set(users_key, registry.serialize(users))


async def authenticate(store: KeyValueStore, credentials: Credentials, users_key: str = USERS_KEY) -> User:
    """Find the registered user matching email and password exactly.

    Raises:
        AuthenticationError: no match (does not reveal whether the email exists)
        StorageError: registry could not be read
    """
    users = await load_registry(store, users_key)
    user = registry.find_match(users, credentials.email, credentials.password)
    if user is None:
        logger.info("Login rejected", extra={"email": credentials.email})
        raise AuthenticationError()
    return user


async def register(store: KeyValueStore, data: SignupData, users_key: str = USERS_KEY) -> User:
    """Create a user and append it to the persisted registry.

    The caller must serialize calls; the email check and the append are not atomic here.

    Raises:
        DuplicateUserError: email already registered
        StorageError: registry could not be read or written
    """
    users = await load_registry(store, users_key)
    if registry.is_email_taken(users, data.email):
        logger.info("Signup rejected: email already registered", extra={"email": data.email})
        raise DuplicateUserError(data.email)

    user = User.create(name=data.name, email=data.email, password=data.password)
    await save_registry(store, registry.append(users, user), users_key)
    logger.info("User registered", extra=user.log_extra)
    return user
