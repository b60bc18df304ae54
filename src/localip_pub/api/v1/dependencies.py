"""Shared API dependencies wiring the session engine into request handlers."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from localip_pub.db.session import get_db
from localip_pub.repositories.address_repo import AddressRepository
from localip_pub.services.session_engine import SessionEngine
from localip_pub.services.state import SessionState
from localip_pub.services.tokens import TokenCodec

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_session_state(request: Request) -> SessionState:
    """Return the process-wide session state built at application start."""
    return request.app.state.session_state


def get_token_codec(request: Request) -> TokenCodec:
    """Return the token codec configured at application start."""
    return request.app.state.token_codec


SessionStateDep = Annotated[SessionState, Depends(get_session_state)]
TokenCodecDep = Annotated[TokenCodec, Depends(get_token_codec)]


def get_session_engine(
    db: SessionDep,
    state: SessionStateDep,
    codec: TokenCodecDep,
) -> SessionEngine:
    """Build a request-scoped engine around the shared state.

    Args:
        db: Database session for this request
        state: Write token table, read throttle and id locks
        codec: Token signer/verifier

    Returns:
        SessionEngine bound to the request's database session
    """
    return SessionEngine(AddressRepository(db), state, codec)


# Type alias for the engine dependency
SessionEngineDep = Annotated[SessionEngine, Depends(get_session_engine)]
