"""Service layer: authentication, token lifecycle and record expiry."""

from .session_engine import EngineResult, SessionEngine, StatusCategory
from .state import SessionState
from .tokens import TokenCodec, TokenMode

__all__ = [
    "EngineResult",
    "SessionEngine",
    "SessionState",
    "StatusCategory",
    "TokenCodec",
    "TokenMode",
]
