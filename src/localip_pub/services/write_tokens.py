"""Issuing and invalidating the single write token an address may have."""
from __future__ import annotations

import logging

from localip_pub.services.auth import TokenAuthenticator
from localip_pub.services.state import SessionState
from localip_pub.services.tokens import TokenCodec, TokenMode, TokenPayload

logger = logging.getLogger(__name__)

__all__ = ["WriteTokenConflictError", "WriteTokenRegistry"]


class WriteTokenConflictError(Exception):
    """Raised when a live write token already exists for an address."""

    def __init__(self, address_id: str) -> None:
        super().__init__(f"write token already exists for {address_id!r}")
        self.address_id = address_id


class WriteTokenRegistry:
    """Enforces at most one live write token per address id."""

    def __init__(
        self,
        state: SessionState,
        authenticator: TokenAuthenticator,
        codec: TokenCodec,
    ) -> None:
        self._state = state
        self._table = state.write_tokens
        self._authenticator = authenticator
        self._codec = codec

    def issue(self, address_id: str) -> str:
        """Mint and register a write token for ``address_id``.

        A registered token that no longer authenticates is replaced.

        Raises:
            WriteTokenConflictError: If the registered token is still valid.
        """
        with self._state.lock_for(address_id):
            existing = self._table.get(address_id)
            if existing is not None:
                check = self._authenticator.authenticate(existing, TokenMode.WRITE)
                if check.ok:
                    logger.info("Refused second write token for %s", address_id)
                    raise WriteTokenConflictError(address_id)
                self._table.remove_if_equal(address_id, existing)

            payload = TokenPayload(
                address_id=address_id,
                mode=TokenMode.WRITE,
                issued_at=self._state.stamp(),
            )
            token = self._codec.sign(payload)
            self._table.put(address_id, token)
        logger.info("Issued write token for %s", address_id)
        return token

    def invalidate(self, address_id: str, token: str) -> bool:
        """Remove ``token`` if it is the live write token registered for ``address_id``.

        Returns False for a wrong, stale, foreign or already invalidated token
        without telling these cases apart.
        """
        # Authenticated outside the id lock: the token may belong to another id's shard.
        check = self._authenticator.authenticate(token, TokenMode.WRITE)
        if not check.ok or check.address_id != address_id:
            return False
        with self._state.lock_for(address_id):
            removed = self._table.remove_if_equal(address_id, token)
        if removed:
            logger.info("Invalidated write token for %s", address_id)
        return removed

    def is_current(self, address_id: str, token: str) -> bool:
        """Return True if ``token`` is exactly the write token on file."""
        return self._table.get(address_id) == token

    def revoke_for_id(self, address_id: str) -> None:
        self._table.revoke(address_id)
