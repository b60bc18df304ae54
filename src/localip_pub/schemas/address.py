"""Address-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class _StrictBody(BaseModel):
    """Request body that rejects unknown keys and non-string values."""

    model_config = ConfigDict(extra="forbid")


class CreateRequest(_StrictBody):
    """Schema for registering a new address id."""

    id: StrictStr = Field(..., description="Address identifier")
    access_password: StrictStr = Field(..., description="Password for token issuance")
    master_password: StrictStr = Field(..., description="Password for deletion")
    lifetime: StrictInt | None = Field(
        None,
        description="Seconds until the address expires; -1 or omitted for unlimited",
    )


class TokenRequest(_StrictBody):
    """Request for a read or write token."""

    id: StrictStr
    password: StrictStr = Field(..., description="Access password")
    mode: StrictStr = Field(..., description="'read' or 'write'")


class InvalidateTokenRequest(_StrictBody):
    """Request to give up a write token."""

    id: StrictStr
    password: StrictStr = Field(..., description="Access password")
    jwt: StrictStr = Field(..., description="Write token to invalidate")


class UpdateRequest(_StrictBody):
    """Publish a new endpoint using a write token."""

    jwt: StrictStr
    ip_address: StrictStr = Field(..., description="IPv4/IPv6 address with optional port")


class RetrieveRequest(_StrictBody):
    """Read the published endpoint using a read token."""

    jwt: StrictStr


class DeleteRequest(_StrictBody):
    """Delete an address id."""

    id: StrictStr
    password: StrictStr = Field(..., description="Master password")


class InfoResponse(BaseModel):
    """Body returned by every address endpoint."""

    info: str
    last_update: int | None = Field(None, description="Milliseconds since epoch, -1 if never")
    lifetime: int | None = Field(None, description="Remaining seconds, -1 if unlimited")
