import uuid
from dataclasses import dataclass
from datetime import datetime, timezone


def _format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class User:
    """A registered user. Immutable once created by signup.

    The password is kept in plaintext to match the stored registry format.
    """
    id: str
    name: str
    email: str
    password: str
    created_at: datetime | None = None

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r}, email={self.email!r})"

    @classmethod
    def create(cls, name: str, email: str, password: str) -> 'User':
        """Build a new user with a fresh id and the current timestamp."""
        return cls(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            password=password,
            created_at=datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'password': self.password,
            'createdAt': _format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'User':
        """Create a User from its stored form. Raises KeyError/ValueError if malformed."""
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            email=data['email'],
            password=data.get('password', ''),
            created_at=_parse_timestamp(data.get('createdAt')),
        )

    @property
    def log_extra(self) -> dict:
        """Common extra fields for structured logging."""
        return {"userId": self.id, "email": self.email}


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str


@dataclass(frozen=True)
class SignupData:
    name: str
    email: str
    password: str
    confirm_password: str | None = None

    @property
    def credentials(self) -> Credentials:
        return Credentials(email=self.email, password=self.password)
