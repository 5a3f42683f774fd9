"""
API request and response models for ShopSession REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
core/models.py, which own the internal domain representation. Route handlers
map between the two.

Wire names follow the JSON clients already send (displayName), while Python
attributes stay snake_case. populate_by_name lets tests and route code build
models with either spelling; FastAPI serializes response models by alias.

Passwords appear only in request models. No response model has a password
field, so a stored password cannot be echoed back even by mistake.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import PublicUser, UserRecord
from core.models import Product

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/auth."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class UserCreate(BaseModel):
    """Request body for POST /api/users and PUT /api/users/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(min_length=5, max_length=32, description="Name must be between 5 and 32 characters long.")
    display_name: str = Field(
        alias="displayName",
        min_length=3,
        max_length=32,
        description="Display name must be between 3 and 32 characters long.",
    )
    password: Optional[str] = Field(default=None, min_length=1, max_length=255)


class UserPatch(BaseModel):
    """Request body for PATCH /api/users/{id}. Only supplied fields change."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=5, max_length=32)
    display_name: Optional[str] = Field(default=None, alias="displayName", min_length=3, max_length=32)
    password: Optional[str] = Field(default=None, min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user: {id, name, displayName}."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    display_name: str = Field(alias="displayName")

    @classmethod
    def from_user(cls, user: "UserRecord | PublicUser") -> "UserResponse":
        """Build a UserResponse from a domain UserRecord or PublicUser.

        Only the three public fields are read, so passing a full UserRecord
        is safe.
        """
        return cls(id=user.id, name=user.name, display_name=user.display_name)


class ProductResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(id=product.id, name=product.name)


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    msg: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[Any] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
    active_sessions: int = 0
