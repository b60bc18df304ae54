# src/localip_pub/api/v1/endpoints/addresses.py
"""Address endpoints: create, tokens, update, retrieve and delete."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from localip_pub.api.v1.dependencies import SessionEngineDep
from localip_pub.schemas.address import (
    CreateRequest,
    DeleteRequest,
    InfoResponse,
    InvalidateTokenRequest,
    RetrieveRequest,
    TokenRequest,
    UpdateRequest,
)
from localip_pub.services.session_engine import EngineResult, StatusCategory

router = APIRouter(tags=["addresses"])

HTTP_STATUS_BY_CATEGORY: dict[StatusCategory, int] = {
    StatusCategory.OK: status.HTTP_200_OK,
    StatusCategory.BAD_INPUT: status.HTTP_400_BAD_REQUEST,
    StatusCategory.CONFLICT: status.HTTP_409_CONFLICT,
    StatusCategory.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    StatusCategory.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    StatusCategory.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _respond(result: EngineResult, response: Response) -> InfoResponse:
    response.status_code = HTTP_STATUS_BY_CATEGORY[result.status]
    return InfoResponse(
        info=result.message,
        last_update=result.last_update,
        lifetime=result.lifetime,
    )


@router.post("/create", response_model=InfoResponse, response_model_exclude_none=True)
async def create_address(
    payload: CreateRequest, engine: SessionEngineDep, response: Response
) -> InfoResponse:
    """Register a new address id."""
    result = engine.create(
        payload.id,
        payload.access_password,
        payload.master_password,
        payload.lifetime,
    )
    return _respond(result, response)


@router.post("/jwt", response_model=InfoResponse, response_model_exclude_none=True)
async def acquire_token(
    payload: TokenRequest, engine: SessionEngineDep, response: Response
) -> InfoResponse:
    """Issue a read or write token in exchange for the access password."""
    result = engine.acquire_token(payload.id, payload.password, payload.mode)
    return _respond(result, response)


@router.post("/invalidatejwt", response_model=InfoResponse, response_model_exclude_none=True)
async def invalidate_token(
    payload: InvalidateTokenRequest, engine: SessionEngineDep, response: Response
) -> InfoResponse:
    """Invalidate the live write token of an address."""
    result = engine.invalidate_token(payload.id, payload.password, payload.jwt)
    return _respond(result, response)


@router.post("/update", response_model=InfoResponse, response_model_exclude_none=True)
async def update_address(
    payload: UpdateRequest, engine: SessionEngineDep, response: Response
) -> InfoResponse:
    """Publish a new endpoint using a write token."""
    result = engine.update(payload.jwt, payload.ip_address)
    return _respond(result, response)


@router.post("/retrieve", response_model=InfoResponse, response_model_exclude_none=True)
async def retrieve_address(
    payload: RetrieveRequest, engine: SessionEngineDep, response: Response
) -> InfoResponse:
    """Return the published endpoint using a read token."""
    result = engine.retrieve(payload.jwt)
    return _respond(result, response)


@router.post("/delete", response_model=InfoResponse, response_model_exclude_none=True)
async def delete_address(
    payload: DeleteRequest, engine: SessionEngineDep, response: Response
) -> InfoResponse:
    """Delete an address id using the master password."""
    result = engine.delete(payload.id, payload.password)
    return _respond(result, response)
