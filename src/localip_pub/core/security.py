"""Password digest utilities."""
from __future__ import annotations

import hashlib
import hmac


def hash_password(password: str) -> str:
    """Return a SHA-256 hex digest of the provided password."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def password_matches(password: str, stored_hash: str) -> bool:
    """Return True if ``password`` digests to ``stored_hash``."""
    return hmac.compare_digest(hash_password(password), stored_hash)
