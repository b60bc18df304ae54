"""Credential and bearer token authentication for address records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from localip_pub.core.security import password_matches
from localip_pub.models.address import AddressRecord
from localip_pub.repositories.address_repo import AddressRepository
from localip_pub.services.lifetime import is_expired
from localip_pub.services.state import SessionState
from localip_pub.services.tokens import TokenCodec, TokenMode

logger = logging.getLogger(__name__)

__all__ = [
    "CredentialAuthenticator",
    "CredentialCheck",
    "DenialReason",
    "PasswordTier",
    "TokenAuthenticator",
    "TokenCheck",
    "purge_record",
]


class DenialReason(str, Enum):
    """Internal reason an authentication attempt was refused."""

    NO_TOKEN = "no-token"
    INVALID_TOKEN = "invalid-token"
    UNKNOWN_SUBJECT = "unknown-subject"
    STALE_SUBJECT = "stale-subject"
    EXPIRED_SUBJECT = "expired-subject"
    WRONG_MODE = "wrong-mode"
    BAD_CREDENTIALS = "bad-credentials"


# Denials that mean the presented token can never succeed again.
_STALE_TOKEN_REASONS = frozenset(
    {
        DenialReason.INVALID_TOKEN,
        DenialReason.UNKNOWN_SUBJECT,
        DenialReason.STALE_SUBJECT,
        DenialReason.EXPIRED_SUBJECT,
    }
)


class PasswordTier(str, Enum):
    """Which of the two stored password hashes a credential is checked against."""

    ACCESS = "access"
    MASTER = "master"


@dataclass(frozen=True)
class CredentialCheck:
    """Outcome of an id + password authentication."""

    record: AddressRecord | None = None
    reason: DenialReason | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class TokenCheck:
    """Outcome of a bearer token authentication."""

    record: AddressRecord | None = None
    reason: DenialReason | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @property
    def address_id(self) -> str | None:
        return self.record.id if self.record is not None else None


def purge_record(repo: AddressRepository, state: SessionState, address_id: str) -> None:
    """Delete an expired record together with its in-memory bookkeeping.

    Purging an id that is already gone is a no-op.
    """
    with state.lock_for(address_id):
        deleted = repo.delete(address_id)
        state.forget(address_id)
    if deleted:
        logger.info("Purged expired address %s", address_id)


class CredentialAuthenticator:
    """Validates id + password pairs against one password tier."""

    def __init__(self, repo: AddressRepository, state: SessionState) -> None:
        self._repo = repo
        self._state = state

    def authenticate(self, address_id: str, password: str, tier: PasswordTier) -> CredentialCheck:
        """Return the record if ``password`` matches the ``tier`` hash of ``address_id``.

        Unknown ids and wrong passwords are indistinguishable to the caller. An
        expired record is purged and reported as a denial.
        """
        with self._state.lock_for(address_id):
            record = self._repo.get(address_id)
            if record is None:
                return CredentialCheck(reason=DenialReason.BAD_CREDENTIALS)

            if is_expired(self._state.clock(), record.expiry):
                purge_record(self._repo, self._state, address_id)
                return CredentialCheck(reason=DenialReason.BAD_CREDENTIALS)

            stored = (
                record.access_password_hash
                if tier is PasswordTier.ACCESS
                else record.master_password_hash
            )
            if not password_matches(password, stored):
                return CredentialCheck(reason=DenialReason.BAD_CREDENTIALS)
            return CredentialCheck(record=record)


class TokenAuthenticator:
    """Validates bearer tokens against the current incarnation of their record."""

    def __init__(self, repo: AddressRepository, codec: TokenCodec, state: SessionState) -> None:
        self._repo = repo
        self._codec = codec
        self._state = state

    def authenticate(self, token: str | None, required_mode: TokenMode) -> TokenCheck:
        """Check ``token``; the first failing check determines the denial reason.

        Denials that make the token permanently unusable also drop it from the
        write token table if it is registered there.
        """
        if not token or not token.strip():
            return TokenCheck(reason=DenialReason.NO_TOKEN)

        check = self._evaluate(token, required_mode)
        if check.reason is None:
            return check
        if check.reason in _STALE_TOKEN_REASONS and self._state.write_tokens.discard(token):
            logger.info("Dropped stale write token (%s)", check.reason.value)
        logger.debug("Token denied: %s", check.reason.value)
        return check

    def _evaluate(self, token: str, required_mode: TokenMode) -> TokenCheck:
        payload = self._codec.verify(token)
        if payload is None:
            return TokenCheck(reason=DenialReason.INVALID_TOKEN)

        with self._state.lock_for(payload.address_id):
            record = self._repo.get(payload.address_id)
            if record is None:
                return TokenCheck(reason=DenialReason.UNKNOWN_SUBJECT)
            # A record created after the token was issued is a later incarnation of the id.
            if record.created_on > payload.issued_at:
                return TokenCheck(reason=DenialReason.STALE_SUBJECT)
            if is_expired(self._state.clock(), record.expiry):
                purge_record(self._repo, self._state, record.id)
                return TokenCheck(reason=DenialReason.EXPIRED_SUBJECT)
            if payload.mode is not required_mode:
                return TokenCheck(reason=DenialReason.WRONG_MODE)
            return TokenCheck(record=record)
