from __future__ import annotations

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits


def generate_password(length: int = 8) -> str:
    """Random alphanumeric credential handed to the applicant."""
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def credentials_match(stored: str, supplied: str) -> bool:
    return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))
