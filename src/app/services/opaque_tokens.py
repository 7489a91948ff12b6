"""
Opaque single-use tokens (password reset, email verification).

The plain token goes to the user; only its SHA-256 digest is stored.
"""

import hashlib
import secrets
from typing import Tuple


def digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate() -> Tuple[str, str]:
    """Returns (plain token, digest to store)"""
    token = secrets.token_urlsafe(32)
    return token, digest(token)
