"""Authentication state and its transition function.

AuthState is immutable; every change goes through ``reduce(state, action)``.
Actions are a closed set of request/success/failure variants:

    InitRequest   → InitSuccess(user | None)  | InitFailure(error)
    LoginRequest  → LoginSuccess(user)        | LoginFailure(error)
    SignupRequest → SignupSuccess(user)       | SignupFailure(error)
    Logout                                    | LogoutFailure(error)
    ClearError

Invariant after every completed transition: is_authenticated == (user is not None).
"""

from dataclasses import dataclass, replace
from enum import Enum

from domain.model.user import User


class AuthStatus(str, Enum):
    INITIALIZING = 'initializing'
    UNAUTHENTICATED = 'unauthenticated'
    AUTHENTICATED = 'authenticated'
    BUSY = 'busy'


@dataclass(frozen=True)
class AuthState:
    user: User | None = None
    is_loading: bool = True
    error: str | None = None
    is_authenticated: bool = False
    initialized: bool = False

    @property
    def status(self) -> AuthStatus:
        if self.is_loading:
            return AuthStatus.BUSY if self.initialized else AuthStatus.INITIALIZING
        if self.user is not None:
            return AuthStatus.AUTHENTICATED
        return AuthStatus.UNAUTHENTICATED


INITIAL_STATE = AuthState()


# ── actions ──────────────────────────────────────────────────

@dataclass(frozen=True)
class InitRequest:
    pass


@dataclass(frozen=True)
class InitSuccess:
    user: User | None


@dataclass(frozen=True)
class InitFailure:
    error: str


@dataclass(frozen=True)
class LoginRequest:
    pass


@dataclass(frozen=True)
class LoginSuccess:
    user: User


@dataclass(frozen=True)
class LoginFailure:
    error: str


@dataclass(frozen=True)
class SignupRequest:
    pass


@dataclass(frozen=True)
class SignupSuccess:
    user: User


@dataclass(frozen=True)
class SignupFailure:
    error: str


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class LogoutFailure:
    error: str


@dataclass(frozen=True)
class ClearError:
    pass


AuthAction = (
    InitRequest | InitSuccess | InitFailure
    | LoginRequest | LoginSuccess | LoginFailure
    | SignupRequest | SignupSuccess | SignupFailure
    | Logout | LogoutFailure
    | ClearError
)


# ── reducer ──────────────────────────────────────────────────

def reduce(state: AuthState, action: AuthAction) -> AuthState:
    """Return the state that results from applying ``action`` to ``state``."""
    match action:
        case InitRequest() | LoginRequest() | SignupRequest():
            # user and is_authenticated keep their pre-request values
            return replace(state, is_loading=True, error=None)
        case InitSuccess(user=user):
            return replace(
                state,
                user=user,
                is_loading=False,
                is_authenticated=user is not None,
                error=None,
                initialized=True,
            )
        case InitFailure(error=error):
            return replace(
                state,
                user=None,
                is_loading=False,
                is_authenticated=False,
                error=error,
                initialized=True,
            )
        case LoginSuccess(user=user) | SignupSuccess(user=user):
            return replace(state, user=user, is_loading=False, is_authenticated=True, error=None)
        case LoginFailure(error=error) | SignupFailure(error=error) | LogoutFailure(error=error):
            return replace(state, is_loading=False, error=error)
        case Logout():
            return replace(state, user=None, is_loading=False, is_authenticated=False, error=None)
        case ClearError():
            return replace(state, error=None)
        case _:
            raise TypeError(f"Unknown auth action: {action!r}")
