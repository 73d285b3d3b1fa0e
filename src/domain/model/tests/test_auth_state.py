"""Unit tests for the auth state transition function."""

import unittest
from dataclasses import replace
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from domain.model.auth_state import (
    INITIAL_STATE,
    AuthState,
    AuthStatus,
    ClearError,
    InitFailure,
    InitRequest,
    InitSuccess,
    LoginFailure,
    LoginRequest,
    LoginSuccess,
    Logout,
    LogoutFailure,
    SignupFailure,
    SignupRequest,
    SignupSuccess,
    reduce,
)
from domain.model.user import User


ANN = User(id='1', name='Ann', email='ann@x.com', password='secret')
UNAUTHENTICATED = AuthState(is_loading=False, initialized=True)
AUTHENTICATED = AuthState(user=ANN, is_loading=False, is_authenticated=True, initialized=True)


class TestInitialState(unittest.TestCase):

    def test_initial_state_is_initializing(self):
        self.assertIsNone(INITIAL_STATE.user)
        self.assertTrue(INITIAL_STATE.is_loading)
        self.assertIsNone(INITIAL_STATE.error)
        self.assertFalse(INITIAL_STATE.is_authenticated)
        self.assertEqual(INITIAL_STATE.status, AuthStatus.INITIALIZING)


class TestInitTransitions(unittest.TestCase):

    def test_init_success_with_user_authenticates(self):
        state = reduce(reduce(INITIAL_STATE, InitRequest()), InitSuccess(ANN))

        self.assertEqual(state.user, ANN)
        self.assertTrue(state.is_authenticated)
        self.assertFalse(state.is_loading)
        self.assertEqual(state.status, AuthStatus.AUTHENTICATED)

    def test_init_success_without_user(self):
        state = reduce(INITIAL_STATE, InitSuccess(None))

        self.assertFalse(state.is_authenticated)
        self.assertEqual(state.status, AuthStatus.UNAUTHENTICATED)

    def test_init_failure_is_unauthenticated_with_error(self):
        state = reduce(INITIAL_STATE, InitFailure('Failed to load user data'))

        self.assertIsNone(state.user)
        self.assertFalse(state.is_authenticated)
        self.assertFalse(state.is_loading)
        self.assertEqual(state.error, 'Failed to load user data')


class TestRequestOverlay(unittest.TestCase):

    def test_login_request_keeps_user_while_busy(self):
        state = reduce(replace(AUTHENTICATED, error='old'), LoginRequest())

        self.assertTrue(state.is_loading)
        self.assertIsNone(state.error)
        self.assertEqual(state.user, ANN)
        self.assertTrue(state.is_authenticated)
        self.assertEqual(state.status, AuthStatus.BUSY)

    def test_signup_request_from_unauthenticated(self):
        state = reduce(UNAUTHENTICATED, SignupRequest())

        self.assertTrue(state.is_loading)
        self.assertIsNone(state.user)
        self.assertEqual(state.status, AuthStatus.BUSY)


class TestSuccessAndFailure(unittest.TestCase):

    def test_login_success(self):
        state = reduce(reduce(UNAUTHENTICATED, LoginRequest()), LoginSuccess(ANN))

        self.assertEqual(state.user, ANN)
        self.assertTrue(state.is_authenticated)
        self.assertFalse(state.is_loading)
        self.assertIsNone(state.error)

    def test_signup_success(self):
        state = reduce(reduce(UNAUTHENTICATED, SignupRequest()), SignupSuccess(ANN))
        self.assertEqual(state.status, AuthStatus.AUTHENTICATED)

    def test_login_failure_keeps_existing_session(self):
        state = reduce(reduce(AUTHENTICATED, LoginRequest()), LoginFailure('Invalid email or password'))

        self.assertEqual(state.user, ANN)
        self.assertTrue(state.is_authenticated)
        self.assertFalse(state.is_loading)
        self.assertEqual(state.error, 'Invalid email or password')

    def test_signup_failure_stays_unauthenticated(self):
        state = reduce(reduce(UNAUTHENTICATED, SignupRequest()), SignupFailure('User already exists'))

        self.assertIsNone(state.user)
        self.assertFalse(state.is_authenticated)
        self.assertEqual(state.error, 'User already exists')


class TestLogoutAndClearError(unittest.TestCase):

    def test_logout_clears_user(self):
        state = reduce(AUTHENTICATED, Logout())

        self.assertIsNone(state.user)
        self.assertFalse(state.is_authenticated)
        self.assertEqual(state.status, AuthStatus.UNAUTHENTICATED)

    def test_logout_twice_is_noop(self):
        once = reduce(AUTHENTICATED, Logout())
        self.assertEqual(reduce(once, Logout()), once)

    def test_logout_failure_keeps_user(self):
        state = reduce(AUTHENTICATED, LogoutFailure('Failed to remove user data'))

        self.assertEqual(state.user, ANN)
        self.assertEqual(state.error, 'Failed to remove user data')

    def test_clear_error_touches_only_error(self):
        errored = reduce(AUTHENTICATED, LoginFailure('Invalid email or password'))
        cleared = reduce(errored, ClearError())

        self.assertIsNone(cleared.error)
        self.assertEqual(cleared.user, errored.user)
        self.assertEqual(cleared.is_loading, errored.is_loading)
        self.assertEqual(cleared.is_authenticated, errored.is_authenticated)

    def test_clear_error_is_idempotent(self):
        self.assertEqual(reduce(INITIAL_STATE, ClearError()), INITIAL_STATE)


class TestInvariant(unittest.TestCase):

    def test_authenticated_matches_user_after_completed_transitions(self):
        sequence = [
            InitSuccess(None), SignupRequest(), SignupSuccess(ANN), LoginRequest(),
            LoginFailure('x'), Logout(), LoginRequest(), LoginSuccess(ANN), ClearError(), Logout(),
        ]
        state = INITIAL_STATE
        for action in sequence:
            state = reduce(state, action)
            if not state.is_loading:
                self.assertEqual(state.is_authenticated, state.user is not None)

    def test_unknown_action_raises(self):
        with self.assertRaises(TypeError):
            reduce(INITIAL_STATE, object())


if __name__ == '__main__':
    unittest.main()
