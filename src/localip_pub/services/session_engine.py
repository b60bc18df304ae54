# src/localip_pub/services/session_engine.py
"""Session engine: the six address operations and their outcome categories.

Every operation returns an :class:`EngineResult`. Internal denial reasons are
collapsed into a few deliberately coarse messages so that callers cannot tell
an unknown id from a wrong password. Collaborator failures (database, token
signing) surface only as ``internal-error``.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from localip_pub.core.security import hash_password
from localip_pub.models.address import NEVER, AddressRecord
from localip_pub.repositories.address_repo import AddressRepository
from localip_pub.services.auth import (
    CredentialAuthenticator,
    DenialReason,
    PasswordTier,
    TokenAuthenticator,
    purge_record,
)
from localip_pub.services.endpoint import InvalidEndpointError, validate_endpoint
from localip_pub.services.lifetime import (
    UNLIMITED,
    InvalidLifetimeError,
    carry_forward_expiry,
    compute_expiry,
    is_expired,
    remaining_lifetime,
)
from localip_pub.services.state import SessionState
from localip_pub.services.tokens import TokenCodec, TokenCodecError, TokenMode, TokenPayload
from localip_pub.services.write_tokens import WriteTokenConflictError, WriteTokenRegistry

logger = logging.getLogger(__name__)

__all__ = ["EngineResult", "SessionEngine", "StatusCategory"]

MSG_BAD_CREDENTIALS = "invalid combination of id and password"
MSG_INVALID_AUTH = "invalid authentication"
MSG_WRONG_MODE = "invalid token mode"
MSG_INVALID_JWT = "invalid jwt"
MSG_INTERNAL = "internal server error"


class StatusCategory(str, Enum):
    """Coarse outcome category exposed to the transport layer."""

    OK = "ok"
    BAD_INPUT = "bad-input"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate-limited"
    INTERNAL_ERROR = "internal-error"


@dataclass(frozen=True)
class EngineResult:
    """Message and category returned by every engine operation.

    ``last_update`` (ms, ``-1`` before the first update) and ``lifetime``
    (remaining seconds, ``-1`` when unlimited) are set by update and retrieve.
    """

    message: str
    status: StatusCategory
    last_update: int | None = None
    lifetime: int | None = None

    @property
    def ok(self) -> bool:
        return self.status is StatusCategory.OK

    @classmethod
    def success(cls, message: str = "", **extra: Any) -> EngineResult:
        return cls(message, StatusCategory.OK, **extra)

    @classmethod
    def bad_input(cls, message: str) -> EngineResult:
        return cls(message, StatusCategory.BAD_INPUT)

    @classmethod
    def unauthorized(cls, message: str) -> EngineResult:
        return cls(message, StatusCategory.UNAUTHORIZED)


F = TypeVar("F", bound=Callable[..., EngineResult])


def _internal_errors_as_result(method: F) -> F:
    """Turn database and codec failures into an ``internal-error`` result."""

    @functools.wraps(method)
    def wrapper(self: SessionEngine, *args: Any, **kwargs: Any) -> EngineResult:
        try:
            return method(self, *args, **kwargs)
        except (SQLAlchemyError, TokenCodecError):
            logger.exception("Address operation %s failed", method.__name__)
            self._repo.session.rollback()
            return EngineResult(MSG_INTERNAL, StatusCategory.INTERNAL_ERROR)

    return wrapper  # type: ignore[return-value]


def _token_denial(reason: DenialReason | None) -> EngineResult:
    if reason is DenialReason.WRONG_MODE:
        return EngineResult.unauthorized(MSG_WRONG_MODE)
    return EngineResult.unauthorized(MSG_INVALID_AUTH)


class SessionEngine:
    """Coordinates authentication, token lifecycle and lazy record expiry.

    The engine is cheap to build per request; long-lived state lives in the
    shared :class:`~localip_pub.services.state.SessionState`.
    """

    def __init__(
        self,
        repo: AddressRepository,
        state: SessionState,
        codec: TokenCodec,
        *,
        max_lifetime_seconds: int | None = None,
    ) -> None:
        self._repo = repo
        self._state = state
        self._codec = codec
        self._max_lifetime = max_lifetime_seconds
        self._credentials = CredentialAuthenticator(repo, state)
        self._tokens = TokenAuthenticator(repo, codec, state)
        self._registry = WriteTokenRegistry(state, self._tokens, codec)

    def _now(self) -> int:
        return self._state.clock()

    @_internal_errors_as_result
    def create(
        self,
        address_id: str,
        access_password: str,
        master_password: str,
        lifetime: int | None = None,
    ) -> EngineResult:
        """Register a new address id guarded by two passwords."""
        if not address_id.strip():
            return EngineResult.bad_input("id cannot be empty")
        if not access_password.strip():
            return EngineResult.bad_input("access password cannot be empty")
        if not master_password.strip():
            return EngineResult.bad_input("master password cannot be empty")

        now = self._state.stamp()
        try:
            expiry = compute_expiry(
                now, UNLIMITED if lifetime is None else lifetime, self._max_lifetime
            )
        except InvalidLifetimeError:
            return EngineResult.bad_input("invalid lifetime setting")

        with self._state.lock_for(address_id):
            existing = self._repo.get(address_id)
            if existing is not None:
                if not is_expired(now, existing.expiry):
                    return EngineResult("id already exists", StatusCategory.CONFLICT)
                purge_record(self._repo, self._state, address_id)

            record = AddressRecord(
                id=address_id,
                access_password_hash=hash_password(access_password),
                master_password_hash=hash_password(master_password),
                ip_address="",
                created_on=now,
                last_update=NEVER,
                expiry=expiry,
            )
            if not self._repo.insert(record):
                return EngineResult("id already exists", StatusCategory.CONFLICT)
            self._state.write_tokens.revoke(address_id)
            self._state.throttle.reset(address_id)

        logger.info("Created address %s (lifetime %s)", address_id, lifetime)
        return EngineResult.success(f"created new address '{address_id}'")

    @_internal_errors_as_result
    def acquire_token(self, address_id: str, password: str, mode: str) -> EngineResult:
        """Exchange the access password for a read or write token."""
        try:
            token_mode = TokenMode(mode)
        except ValueError:
            return EngineResult.bad_input("invalid jwt mode")

        # The token must be minted for the incarnation the password was checked against.
        with self._state.lock_for(address_id):
            credential = self._credentials.authenticate(
                address_id, password, PasswordTier.ACCESS
            )
            if not credential.ok:
                return EngineResult.unauthorized(MSG_BAD_CREDENTIALS)

            if token_mode is TokenMode.WRITE:
                try:
                    token = self._registry.issue(address_id)
                except WriteTokenConflictError:
                    return EngineResult("write jwt already exists", StatusCategory.CONFLICT)
                return EngineResult.success(token)

            if not self._state.throttle.try_acquire(address_id):
                logger.info("Read token requests for %s throttled", address_id)
                return EngineResult(
                    "too many read token requests, try again later",
                    StatusCategory.RATE_LIMITED,
                )
            payload = TokenPayload(
                address_id=address_id, mode=TokenMode.READ, issued_at=self._state.stamp()
            )
            return EngineResult.success(self._codec.sign(payload))

    @_internal_errors_as_result
    def invalidate_token(self, address_id: str, password: str, token: str) -> EngineResult:
        """Give up the write token of an address.

        An empty token is rejected before the password is checked; every other
        property of the token is only examined after the password matched.
        """
        if not token or not token.strip():
            return EngineResult.bad_input(MSG_INVALID_JWT)

        credential = self._credentials.authenticate(address_id, password, PasswordTier.ACCESS)
        if not credential.ok:
            return EngineResult.unauthorized(MSG_BAD_CREDENTIALS)

        if not self._registry.invalidate(address_id, token):
            return EngineResult.bad_input(MSG_INVALID_JWT)
        return EngineResult.success()

    @_internal_errors_as_result
    def update(self, token: str, endpoint: str) -> EngineResult:
        """Publish ``endpoint`` for the address the write token belongs to."""
        try:
            canonical = validate_endpoint(endpoint)
        except InvalidEndpointError:
            return EngineResult.bad_input("invalid ip address")

        check = self._tokens.authenticate(token, TokenMode.WRITE)
        if not check.ok or check.address_id is None:
            return _token_denial(check.reason)
        address_id = check.address_id

        with self._state.lock_for(address_id):
            if not self._registry.is_current(address_id, token):
                return EngineResult.unauthorized(MSG_INVALID_AUTH)
            record = self._repo.get(address_id)
            if record is None:
                return EngineResult.unauthorized(MSG_INVALID_AUTH)

            now = self._now()
            expiry = carry_forward_expiry(record.expiry, record.lifetime_reference, now)
            updated = self._repo.update(
                address_id, ip_address=canonical, last_update=now, expiry=expiry
            )
            if not updated:
                return EngineResult.unauthorized(MSG_INVALID_AUTH)

        logger.debug("Updated endpoint of %s", address_id)
        return EngineResult.success(last_update=now, lifetime=remaining_lifetime(expiry, now))

    @_internal_errors_as_result
    def retrieve(self, token: str) -> EngineResult:
        """Return the endpoint published for the address the read token belongs to."""
        check = self._tokens.authenticate(token, TokenMode.READ)
        if not check.ok or check.record is None:
            return _token_denial(check.reason)
        record = check.record
        return EngineResult.success(
            record.endpoint,
            last_update=record.last_update,
            lifetime=remaining_lifetime(record.expiry, self._now()),
        )

    @_internal_errors_as_result
    def delete(self, address_id: str, master_password: str) -> EngineResult:
        """Remove an address and everything kept in memory for it."""
        with self._state.lock_for(address_id):
            credential = self._credentials.authenticate(
                address_id, master_password, PasswordTier.MASTER
            )
            if not credential.ok:
                return EngineResult.unauthorized(MSG_BAD_CREDENTIALS)
            self._registry.revoke_for_id(address_id)
            self._state.forget(address_id)
            self._repo.delete(address_id)

        logger.info("Deleted address %s", address_id)
        return EngineResult.success(f"deleted address '{address_id}'")
