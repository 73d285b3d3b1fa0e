"""Unit tests for auth_service module."""

import json
import unittest
from unittest.mock import AsyncMock
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from adapter.fake.key_value_store import FakeKeyValueStore
from domain.model.errors import AuthenticationError, DuplicateUserError, StorageError
from domain.model.user import Credentials, SignupData
from services.auth_service import USERS_KEY, authenticate, load_registry, register


ANN_SIGNUP = SignupData(name='Ann', email='ann@x.com', password='secret')


class TestRegister(unittest.IsolatedAsyncioTestCase):
    """Test register function."""

    async def asyncSetUp(self):
        self.store = FakeKeyValueStore()

    async def test_register_success_persists_registry(self):
        user = await register(self.store, ANN_SIGNUP)

        self.assertEqual(user.email, 'ann@x.com')
        self.assertEqual(user.name, 'Ann')
        stored = json.loads(self.store.store[USERS_KEY])
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0]['id'], user.id)
        self.assertEqual(stored[0]['password'], 'secret')

    async def test_register_appends_in_order(self):
        await register(self.store, ANN_SIGNUP)
        await register(self.store, SignupData(name='Bob', email='bob@x.com', password='hunter22'))

        users = await load_registry(self.store)
        self.assertEqual([u.email for u in users], ['ann@x.com', 'bob@x.com'])

    async def test_register_duplicate_email_raises_and_keeps_registry(self):
        await register(self.store, ANN_SIGNUP)
        before = self.store.store[USERS_KEY]

        with self.assertRaises(DuplicateUserError) as ctx:
            await register(self.store, SignupData(name='Other', email='ann@x.com', password='other1'))

        self.assertEqual(str(ctx.exception), 'User already exists')
        self.assertEqual(self.store.store[USERS_KEY], before)

    async def test_register_email_match_is_case_sensitive(self):
        await register(self.store, ANN_SIGNUP)
        await register(self.store, SignupData(name='Ann', email='ANN@x.com', password='secret'))

        self.assertEqual(len(await load_registry(self.store)), 2)

    async def test_register_uses_custom_users_key(self):
        await register(self.store, ANN_SIGNUP, users_key='custom')
        self.assertIn('custom', self.store.store)
        self.assertNotIn(USERS_KEY, self.store.store)

    async def test_register_write_failure_raises_storage_error(self):
        store = AsyncMock()
        store.get.return_value = None
        store.set.side_effect = StorageError('disk full')

        with self.assertRaises(StorageError):
            await register(store, ANN_SIGNUP)


class TestAuthenticate(unittest.IsolatedAsyncioTestCase):
    """Test authenticate function."""

    async def asyncSetUp(self):
        self.store = FakeKeyValueStore()
        self.ann = await register(self.store, ANN_SIGNUP)

    async def test_authenticate_success(self):
        user = await authenticate(self.store, Credentials(email='ann@x.com', password='secret'))
        self.assertEqual(user, self.ann)

    async def test_authenticate_wrong_password(self):
        with self.assertRaises(AuthenticationError) as ctx:
            await authenticate(self.store, Credentials(email='ann@x.com', password='wrong1'))
        self.assertEqual(str(ctx.exception), 'Invalid email or password')

    async def test_authenticate_unknown_email(self):
        with self.assertRaises(AuthenticationError):
            await authenticate(self.store, Credentials(email='nobody@x.com', password='secret'))

    async def test_authenticate_empty_registry(self):
        with self.assertRaises(AuthenticationError):
            await authenticate(FakeKeyValueStore(), Credentials(email='ann@x.com', password='secret'))

    async def test_authenticate_corrupt_registry_raises_storage_error(self):
        store = FakeKeyValueStore({USERS_KEY: 'not json'})

        with self.assertRaises(StorageError):
            await authenticate(store, Credentials(email='ann@x.com', password='secret'))


if __name__ == '__main__':
    unittest.main()
