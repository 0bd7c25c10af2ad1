# orgauth/api/endpoints/approvals.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.api.deps import get_db_session
from orgauth.core.rbac import require_admin
from orgauth.models.training import Training
from orgauth.models.user import User
from orgauth.schemas.approval import ResolveRequest, ResolveResponse
from orgauth.services.approval_service import build_approval_actions
from orgauth.services.approver_service import resolve_approval_steps
from orgauth.services.directory_service import get_employee
from orgauth.services.eligibility_service import get_restrictions

router = APIRouter(
    prefix="/api/approvals",
    tags=["Approvals"]
)


# Preview who would have to approve a request (nothing is persisted)
@router.post("/resolve", response_model=ResolveResponse)
async def resolve_preview(
    payload: ResolveRequest,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session)
):
    requester = await get_employee(session, payload.requester_employee_id)
    if not requester:
        raise HTTPException(404, "Requester not found")

    restrictions = None
    if payload.training_id is not None:
        training = await session.get(Training, payload.training_id)
        if not training:
            raise HTTPException(404, "Training not found")
        restrictions = await get_restrictions(session, training.id)

    steps = await resolve_approval_steps(session, payload.steps, requester, restrictions)

    actions = []
    for step in steps:
        actions.extend(build_approval_actions(step))

    return ResolveResponse(
        requester_employee_id=requester.id,
        steps=steps,
        actions=actions,
    )
