from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class ApproverType(str, Enum):
    user = "user"
    role = "role"
    position = "position"


# ------------------------------------------------------------
# CONFIGURED APPROVERS (part of an approval step definition)
# ------------------------------------------------------------
class UserApproverConfig(BaseModel):
    type: Literal["user"] = "user"
    user_id: int


class RoleApproverConfig(BaseModel):
    type: Literal["role"] = "role"
    role_id: int


class PositionApproverConfig(BaseModel):
    type: Literal["position"] = "position"
    position_id: int


ApproverConfig = Annotated[
    Union[UserApproverConfig, RoleApproverConfig, PositionApproverConfig],
    Field(discriminator="type"),
]


class ApprovalStep(BaseModel):
    name: str
    description: Optional[str] = None
    approvers: List[ApproverConfig] = []


# ------------------------------------------------------------
# RESOLVED APPROVERS (one concrete obligation each)
# ------------------------------------------------------------
DedupKey = Tuple[str, Optional[int], Optional[int], Optional[int]]


class ResolvedUserApprover(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["user"] = "user"
    user_id: int

    # Provenance, kept for audit only
    resolved_from: ApproverType = ApproverType.user
    source_role_id: Optional[int] = None
    source_position_id: Optional[int] = None

    escalated: bool = False
    # Configured id before escalation
    original_reference: Optional[int] = None

    @property
    def dedup_key(self) -> DedupKey:
        return (self.type, self.user_id, None, None)


class ResolvedRoleApprover(BaseModel):
    """Role with no member in the requester's unit; checked again at act time."""
    model_config = ConfigDict(frozen=True)

    type: Literal["role"] = "role"
    role_id: int

    @property
    def user_id(self) -> None:
        return None

    @property
    def dedup_key(self) -> DedupKey:
        return (self.type, None, self.role_id, None)


class ResolvedPositionApprover(BaseModel):
    """Position without a resolved incumbent (vacant, or faculty-tier escalation)."""
    model_config = ConfigDict(frozen=True)

    type: Literal["position"] = "position"
    position_id: int

    escalated_to_faculty: bool = False
    original_reference: Optional[int] = None

    @property
    def user_id(self) -> None:
        return None

    @property
    def dedup_key(self) -> DedupKey:
        return (self.type, None, None, self.position_id)


ResolvedApprover = Annotated[
    Union[ResolvedUserApprover, ResolvedRoleApprover, ResolvedPositionApprover],
    Field(discriminator="type"),
]


class ResolvedStep(BaseModel):
    index: int
    name: str
    approvers: List[ResolvedApprover] = []

    # Configured approvers resolved to nobody: surface it, never auto-approve
    needs_attention: bool = False
