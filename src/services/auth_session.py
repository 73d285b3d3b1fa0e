"""Auth session — the authentication lifecycle state machine.

One AuthSession is constructed per process. It owns the AuthState snapshot,
notifies subscribers after every transition, and orchestrates
init/login/signup/logout against the registry and the session record.

Flow:
    login/signup/logout → single-flight lock → *Request → auth_service → store
                                                   ↓
                               *Success / *Failure → reduce() → subscribers

Mutating actions are serialized through one lock, so "email not taken, then
append" in signup is atomic with respect to other session actions. Once
started, an action runs to completion even if its caller is cancelled.
"""

import asyncio
import json
import logging
import os
from typing import Awaitable, Callable, TypeVar

from domain.model.auth_state import (
    INITIAL_STATE,
    AuthAction,
    AuthState,
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
from domain.model.errors import DomainError, StorageError
from domain.model.user import Credentials, SignupData, User
from port.key_value_store import KeyValueStore
from services import auth_service

logger = logging.getLogger(__name__)

SESSION_KEY = os.getenv('AUTH_SESSION_KEY', '@auth_user')
SIMULATED_LATENCY_SECONDS = float(os.getenv('AUTH_SIMULATED_LATENCY', '1.0'))

LOAD_FAILED_MESSAGE = 'Failed to load user data'
STORAGE_FAILED_MESSAGE = 'Failed to access user data'
REMOVE_FAILED_MESSAGE = 'Failed to remove user data'
LOGIN_FAILED_MESSAGE = 'Login failed'
SIGNUP_FAILED_MESSAGE = 'Signup failed'

Listener = Callable[[AuthState], None]
T = TypeVar('T')


def _failure_message(error: DomainError) -> str:
    if isinstance(error, StorageError):
        return STORAGE_FAILED_MESSAGE
    return str(error)


class AuthSession:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        latency: float | None = None,
        session_key: str = SESSION_KEY,
        users_key: str = auth_service.USERS_KEY,
    ):
        self.store = store
        self.latency = SIMULATED_LATENCY_SECONDS if latency is None else latency
        self.session_key = session_key
        self.users_key = users_key
        self._state = INITIAL_STATE
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()
        self._init_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

    @classmethod
    async def create(cls, store: KeyValueStore, **kwargs) -> 'AuthSession':
        """Construct a session and run INIT, as at process start."""
        session = cls(store, **kwargs)
        await session.initialize()
        return session

    # ── state & subscribers ──────────────────────────────────

    @property
    def state(self) -> AuthState:
        """Most recently committed state. Never blocks."""
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(state)`` after every transition. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, action: AuthAction) -> None:
        self._state = reduce(self._state, action)
        logger.debug("Auth transition", extra={"action": type(action).__name__, "status": self._state.status.value})
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Auth state listener failed", extra={"action": type(action).__name__})

    async def _run_to_completion(self, coro: Awaitable[T]) -> T:
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return await asyncio.shield(task)

    # ── INIT ─────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Restore the session record. Runs once; later calls await the same run."""
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._load_stored_user())
        await asyncio.shield(self._init_task)

    async def _after_init(self) -> None:
        # INIT commits before any action that was queued behind it
        if self._init_task is not None:
            await asyncio.shield(self._init_task)

    async def _load_stored_user(self) -> None:
        self._dispatch(InitRequest())
        try:
            raw = await self.store.get(self.session_key)
            user = User.from_dict(json.loads(raw)) if raw else None
        except Exception as e:
            logger.error("Failed to restore session", extra={"error": str(e)}, exc_info=True)
            self._dispatch(InitFailure(LOAD_FAILED_MESSAGE))
            return

        self._dispatch(InitSuccess(user))
        if user:
            logger.info("Session restored", extra=user.log_extra)
        else:
            logger.info("No stored session")

    # ── LOGIN / SIGNUP ───────────────────────────────────────

    async def login(self, credentials: Credentials) -> User:
        """Authenticate against the registry and persist the session record.

        Raises AuthenticationError or StorageError after recording the failure in state.
        On failure the previous user (if any) stays signed in.
        """
        return await self._run_to_completion(self._login(credentials))

    async def _login(self, credentials: Credentials) -> User:
        async with self._lock:
            await self._after_init()
            self._dispatch(LoginRequest())
            try:
                await asyncio.sleep(self.latency)
                user = await auth_service.authenticate(self.store, credentials, self.users_key)
                await self._save_session(user)
            except DomainError as e:
                self._dispatch(LoginFailure(_failure_message(e)))
                raise
            except Exception:
                logger.exception("Unexpected login failure", extra={"email": credentials.email})
                self._dispatch(LoginFailure(LOGIN_FAILED_MESSAGE))
                raise

            self._dispatch(LoginSuccess(user))
            logger.info("User logged in", extra=user.log_extra)
            return user

    async def signup(self, data: SignupData) -> User:
        """Register a new user, persist registry and session record, and sign in.

        Raises DuplicateUserError or StorageError after recording the failure in state.
        """
        return await self._run_to_completion(self._signup(data))

    async def _signup(self, data: SignupData) -> User:
        async with self._lock:
            await self._after_init()
            self._dispatch(SignupRequest())
            try:
                await asyncio.sleep(self.latency)
                user = await auth_service.register(self.store, data, self.users_key)
                await self._save_session(user)
            except DomainError as e:
                self._dispatch(SignupFailure(_failure_message(e)))
                raise
            except Exception:
                logger.exception("Unexpected signup failure", extra={"email": data.email})
                self._dispatch(SignupFailure(SIGNUP_FAILED_MESSAGE))
                raise

            self._dispatch(SignupSuccess(user))
            logger.info("User signed up", extra=user.log_extra)
            return user

    async def _save_session(self, user: User) -> None:
        await self.store.set(self.session_key, json.dumps(user.to_dict()))

    # ── LOGOUT / CLEAR_ERROR ─────────────────────────────────

    async def logout(self) -> None:
        """Remove the session record. The registry is untouched. Idempotent."""
        await self._run_to_completion(self._logout())

    async def _logout(self) -> None:
        async with self._lock:
            await self._after_init()
            previous = self._state.user
            try:
                await self.store.remove(self.session_key)
            except StorageError:
                self._dispatch(LogoutFailure(REMOVE_FAILED_MESSAGE))
                raise

            self._dispatch(Logout())
            if previous:
                logger.info("User logged out", extra=previous.log_extra)

    def clear_error(self) -> None:
        self._dispatch(ClearError())
