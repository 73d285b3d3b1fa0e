#!/usr/bin/env python
"""Command line front end for the auth session.

Every invocation is one process start: the stored session is restored
first, then the requested command runs through the same form controllers
a screen would use.

    authapp signup --name Ann --email ann@x.com --password secret
    authapp login --email ann@x.com --password secret
    authapp status
    authapp logout
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Must run before importing modules that read env vars
load_dotenv()

# Add src to path
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from cli.dependencies import get_key_value_store
from domain.model.errors import StorageError
from services.auth_session import AuthSession
from services.forms import FormController, LoginForm, SignupForm
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='authapp', description="Local account sign-up and session management")
    parser.add_argument("--backend", choices=['file', 'redis', 'mongodb', 'memory'], default=None,
                        help="Storage backend (default: AUTH_STORE_BACKEND or 'file')")
    parser.add_argument("--verbose", action="store_true", help="Emit JSON logs on stderr")
    commands = parser.add_subparsers(dest="command", required=True)

    signup = commands.add_parser("signup", help="Create an account and sign in")
    signup.add_argument("--name", required=True)
    signup.add_argument("--email", required=True)
    signup.add_argument("--password", required=True)
    signup.add_argument("--confirm-password", default='')

    login = commands.add_parser("login", help="Sign in with email and password")
    login.add_argument("--email", required=True)
    login.add_argument("--password", required=True)

    commands.add_parser("logout", help="Sign out of the current session")
    commands.add_parser("status", help="Show the current session")
    return parser


def _print_form_errors(form: FormController) -> None:
    for field, message in form.errors.items():
        print(f"{field}: {message}", file=sys.stderr)


async def _submit(form: FormController, session: AuthSession, values: dict[str, str]) -> int:
    for field, value in values.items():
        form.handle_change(field, value)

    if await form.submit():
        user = session.state.user
        print(f"Signed in as {user.name} <{user.email}>")
        return 0

    if form.errors:
        _print_form_errors(form)
    elif session.state.error:
        print(f"Error: {session.state.error}", file=sys.stderr)
    return 1


async def run(args: argparse.Namespace) -> int:
    store = get_key_value_store(args.backend)
    try:
        session = await AuthSession.create(store)
        if session.state.error:
            print(f"Warning: {session.state.error}", file=sys.stderr)
            session.clear_error()

        if args.command == 'signup':
            return await _submit(SignupForm(session), session, {
                'name': args.name,
                'email': args.email,
                'password': args.password,
                'confirm_password': args.confirm_password,
            })

        if args.command == 'login':
            return await _submit(LoginForm(session), session, {
                'email': args.email,
                'password': args.password,
            })

        if args.command == 'logout':
            try:
                await session.logout()
            except StorageError:
                print(f"Error: {session.state.error}", file=sys.stderr)
                return 1
            print("Logged out")
            return 0

        user = session.state.user
        if session.is_authenticated and user:
            print(f"Logged in as {user.name} <{user.email}> (id {user.id})")
        else:
            print("Not logged in")
        return 0
    finally:
        close = getattr(store, 'close', None)
        if close:
            await close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        setup_structured_logging()
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        return asyncio.run(run(args))
    except StorageError as e:
        logger.error("Storage unavailable", extra={"error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
