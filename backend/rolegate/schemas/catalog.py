from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class RoleDisplay(BaseModel):
    name: str
    description: str
    color: str = "gray"
    icon: str = "mdi:account"


class RoleDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    rank: StrictInt = Field(..., ge=1)
    permissions: list[str] = Field(default_factory=list)
    inherits: list[str] = Field(default_factory=list)
    display: RoleDisplay | None = None


class CatalogDocument(BaseModel):
    """On-disk JSON shape of a role catalog."""

    model_config = ConfigDict(extra="forbid")

    inheritance: Literal["flattened", "direct"] | None = None
    super_admin_role: str | None = None
    admin_role: str | None = None
    roles: list[RoleDefinition] = Field(..., min_length=1)


class RoleResponse(BaseModel):
    name: str
    rank: int
    display: RoleDisplay


class RolePermissionsResponse(BaseModel):
    role: str
    permissions: list[str]


class PrincipalPermissionsResponse(BaseModel):
    role: str | None
    permissions: list[str]


class RoleAssignmentRequest(BaseModel):
    target_role: str = Field(..., min_length=1, max_length=100)


class RoleAssignmentResponse(BaseModel):
    assigner_role: str | None
    target_role: str
    allowed: bool
