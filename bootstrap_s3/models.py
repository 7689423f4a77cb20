from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Machine role; scopes object keys and bucket policy prefixes."""

    CONTROL_PLANE = "control-plane"
    NODE = "node"


def role_name(role: Role | str) -> str:
    return role.value if isinstance(role, Role) else role


class BucketSpec(BaseModel):
    """Cluster-level bucket settings, as accepted by the cluster resource."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = Field(default=True, description="Feature gate for S3 bootstrap delivery.")
    create: bool = Field(default=False, description="Whether the bucket is created and managed by the controller.")
    name: str | None = Field(default=None, description="Explicit bucket name; derived from the cluster when empty.")
    control_plane_identity: str = Field(
        default="",
        alias="controlPlaneIAMInstanceProfile",
        description="IAM role name attached to control-plane machines.",
    )
    node_identities: list[str] = Field(
        default_factory=list,
        alias="nodesIAMInstanceProfiles",
        description="IAM role names attached to worker machines.",
    )

    @property
    def management_enabled(self) -> bool:
        return self.enabled and self.create


@dataclass(frozen=True, slots=True)
class MachineRef:
    """Identity of a machine requesting bootstrap data."""

    role: Role | str
    name: str

    @property
    def key(self) -> str:
        return f"{role_name(self.role)}/{self.name}"
