"""
Password complexity policy shared by register, change and reset.
"""

import re
from typing import Optional

from libs.result import Error, Result, Return

MIN_LENGTH = 8
# bcrypt only accepts the first 72 bytes
MAX_BYTES = 72
SPECIAL_CHARACTERS = "@$!%*?&#"

_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
    (re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]"), "one special character (@$!%*?&#)"),
)


def validate_password(password: str, field: str = "password") -> Result[None]:
    if len(password) < MIN_LENGTH:
        return Return.err(
            Error(
                "VALIDATION_ERROR",
                f"{field} must be at least {MIN_LENGTH} characters long",
            )
        )

    if len(password.encode("utf-8")) > MAX_BYTES:
        return Return.err(
            Error("VALIDATION_ERROR", f"{field} must be at most {MAX_BYTES} bytes long")
        )

    missing = [label for pattern, label in _RULES if not pattern.search(password)]
    if missing:
        return Return.err(
            Error(
                "VALIDATION_ERROR",
                f"{field} must contain at least " + ", ".join(missing),
            )
        )

    return Return.ok(None)


def validate_new_password(
    new_password: str, confirm_password: Optional[str]
) -> Result[None]:
    """Complexity plus confirmation match"""
    if confirm_password is not None and new_password != confirm_password:
        return Return.err(Error("VALIDATION_ERROR", "Passwords must match"))
    return validate_password(new_password, field="newPassword")


def rotate_password(account, new_hash: str, history_size: int, max_age, now) -> None:
    """Install a new hash, keeping the old one in the reuse history"""
    if history_size > 0 and account.password_hash:
        history = list(account.password_history or []) + [account.password_hash]
        account.password_history = history[-history_size:]
    account.password_hash = new_hash
    account.password_expires_at = now + max_age
    account.must_change_password = False
