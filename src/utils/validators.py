"""Format validators for credential input.

Pure and cheap; safe to call on every keystroke.
"""

import os
import re

MIN_PASSWORD_LENGTH = int(os.getenv('AUTH_MIN_PASSWORD_LENGTH', '6'))

# local@domain.tld: no whitespace, one '@', a dot in the domain with text on both sides
EMAIL_PATTERN = re.compile(r'[^\s@]+@[^\s@]+\.[^\s@]+')


def validate_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_password(password: str, min_length: int = MIN_PASSWORD_LENGTH) -> bool:
    return len(password) >= min_length
