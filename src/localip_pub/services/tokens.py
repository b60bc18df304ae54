# src/localip_pub/services/tokens.py
"""Bearer token encoding and verification built on signed JWTs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from jose import jwt
from jose.exceptions import JOSEError

from localip_pub.core.settings import settings

logger = logging.getLogger(__name__)

__all__ = ["TokenCodec", "TokenCodecError", "TokenMode", "TokenPayload"]


class TokenMode(str, Enum):
    """Capability granted by a bearer token."""

    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded token content; lives only inside the bearer string."""

    address_id: str
    mode: TokenMode
    issued_at: int  # ms since the epoch, compared against AddressRecord.created_on


class TokenCodecError(RuntimeError):
    """Raised when a token cannot be signed."""


class TokenCodec:
    """Signs token payloads into JWTs and verifies them.

    Tokens carry an absolute ``exp`` claim ``ttl_seconds`` after signing, so a
    token stops verifying on its own regardless of any server-side state.
    """

    def __init__(
        self,
        secret: str | None = None,
        *,
        algorithm: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self._secret = secret if secret is not None else settings.jwt_secret
        self._algorithm = algorithm or settings.jwt_algorithm
        self._ttl = timedelta(
            seconds=settings.token_ttl_seconds if ttl_seconds is None else ttl_seconds
        )

    def sign(self, payload: TokenPayload) -> str:
        """Return the bearer string for ``payload``."""
        issued = datetime.now(UTC)
        claims: dict[str, object] = {
            "sub": payload.address_id,
            "mode": payload.mode.value,
            "issued_at": payload.issued_at,
            "iat": issued,
            "exp": issued + self._ttl,
        }
        try:
            token: str = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        except JOSEError as err:
            raise TokenCodecError("could not sign token") from err
        return token

    def verify(self, token: str) -> TokenPayload | None:
        """Return the decoded payload, or None if the token is not valid."""
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JOSEError as err:
            logger.debug("Token rejected by codec: %s", err)
            return None

        subject = claims.get("sub")
        issued_at = claims.get("issued_at")
        try:
            mode = TokenMode(claims.get("mode"))
        except ValueError:
            return None
        if not isinstance(subject, str) or not subject:
            return None
        if isinstance(issued_at, bool) or not isinstance(issued_at, int):
            return None
        return TokenPayload(address_id=subject, mode=mode, issued_at=issued_at)
