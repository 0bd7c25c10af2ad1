from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from orgauth.schemas.approver import ApprovalStep, ResolvedStep


# ---------------------------------------------------------
# RESOLUTION PREVIEW (admin)
# ---------------------------------------------------------
class ResolveRequest(BaseModel):
    requester_employee_id: int
    steps: List[ApprovalStep]
    # Narrows position approvers to the training's allow-lists
    training_id: Optional[int] = None


class ResolveResponse(BaseModel):
    requester_employee_id: int
    steps: List[ResolvedStep]
    actions: List[Dict[str, Any]]
