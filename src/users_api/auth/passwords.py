"""
users_api.auth.passwords

Bcrypt password hashing.
"""

from __future__ import annotations

import bcrypt

# Inputs past this many bytes are rejected by bcrypt 5 and silently truncated by older releases.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    def __init__(self, *, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)).decode(
            "utf-8"
        )

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash; treat as a failed login rather than a server error.
            return False
