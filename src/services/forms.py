"""Form controllers for the login and signup screens.

A controller owns the raw field strings and a per-field error mapping.
Editing a field clears only that field's error; validation runs on submit.
Session failures are not duplicated here; the session's ``state.error``
already carries the message.
"""

import logging
from abc import ABC, abstractmethod

from domain.model.errors import DomainError, ValidationError
from domain.model.user import Credentials, SignupData
from services.auth_session import AuthSession
from utils.validators import MIN_PASSWORD_LENGTH, validate_email, validate_password

logger = logging.getLogger(__name__)


def _email_error(email: str) -> str | None:
    if not email.strip():
        return 'Email is required'
    if not validate_email(email):
        return 'Please enter a valid email address'
    return None


def _password_error(password: str) -> str | None:
    if not password:
        return 'Password is required'
    if not validate_password(password):
        return f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
    return None


class FormController(ABC):
    fields: tuple[str, ...] = ()

    def __init__(self, session: AuthSession):
        self.session = session
        self.values: dict[str, str] = {name: '' for name in self.fields}
        self.errors: dict[str, str] = {}

    @property
    def is_loading(self) -> bool:
        return self.session.state.is_loading

    def handle_change(self, field: str, value: str) -> None:
        if field not in self.values:
            raise KeyError(f"Unknown form field: {field}")
        self.values[field] = value
        self.errors.pop(field, None)

    @abstractmethod
    def _collect_errors(self) -> dict[str, str]:
        """Map each invalid field to its message; empty when the form is valid."""

    def _check(self) -> None:
        errors = self._collect_errors()
        if errors:
            raise ValidationError(errors)

    def validate(self) -> bool:
        try:
            self._check()
        except ValidationError as e:
            self.errors = dict(e.field_errors)
            return False
        self.errors = {}
        return True

    @abstractmethod
    async def _submit_to_session(self) -> None:
        """Run the session action this form drives."""

    async def submit(self) -> bool:
        """Validate, then call the session. Returns True when the action succeeded."""
        if not self.validate():
            return False
        try:
            await self._submit_to_session()
        except DomainError as e:
            logger.info("Form submission rejected", extra={"form": type(self).__name__, "error": str(e)})
            return False
        except Exception:
            logger.exception("Form submission failed", extra={"form": type(self).__name__})
            return False
        return True


class LoginForm(FormController):
    fields = ('email', 'password')

    @property
    def credentials(self) -> Credentials:
        return Credentials(email=self.values['email'], password=self.values['password'])

    def _collect_errors(self) -> dict[str, str]:
        errors = {}
        if message := _email_error(self.values['email']):
            errors['email'] = message
        if message := _password_error(self.values['password']):
            errors['password'] = message
        return errors

    async def _submit_to_session(self) -> None:
        await self.session.login(self.credentials)


class SignupForm(FormController):
    fields = ('name', 'email', 'password', 'confirm_password')

    @property
    def signup_data(self) -> SignupData:
        return SignupData(
            name=self.values['name'],
            email=self.values['email'],
            password=self.values['password'],
            confirm_password=self.values['confirm_password'] or None,
        )

    def _collect_errors(self) -> dict[str, str]:
        errors = {}
        if not self.values['name'].strip():
            errors['name'] = 'Name is required'
        if message := _email_error(self.values['email']):
            errors['email'] = message
        if message := _password_error(self.values['password']):
            errors['password'] = message
        confirm = self.values['confirm_password']
        if confirm and confirm != self.values['password']:
            errors['confirm_password'] = 'Passwords do not match'
        return errors

    async def _submit_to_session(self) -> None:
        await self.session.signup(self.signup_data)
