"""Pydantic schemas for request and response bodies."""

from .address import (
    CreateRequest,
    DeleteRequest,
    InfoResponse,
    InvalidateTokenRequest,
    RetrieveRequest,
    TokenRequest,
    UpdateRequest,
)

__all__ = [
    "CreateRequest",
    "DeleteRequest",
    "InfoResponse",
    "InvalidateTokenRequest",
    "RetrieveRequest",
    "TokenRequest",
    "UpdateRequest",
]
