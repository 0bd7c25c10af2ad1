# orgauth/services/approval_service.py
#
# Bridges resolved approvers and the workflow that persists/acts on them.

from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.models.employee import Employee
from orgauth.models.user import User
from orgauth.schemas.approver import (
    ResolvedApprover,
    ResolvedPositionApprover,
    ResolvedRoleApprover,
    ResolvedStep,
    ResolvedUserApprover,
)
from orgauth.services.directory_service import (
    effective_faculty_id,
    get_employee,
    get_employee_for_user,
    user_has_role,
)

PENDING = "pending"


def _action_row(step_index: int, approver: ResolvedApprover) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "step_index": step_index,
        "approver_id": None,
        "approver_role_id": None,
        "approver_position_id": None,
        "status": PENDING,
        "meta": {},
    }

    if isinstance(approver, ResolvedUserApprover):
        # Personal obligation: role/position columns stay empty
        row["approver_id"] = approver.user_id
        row["meta"] = {
            "resolved_from": approver.resolved_from.value,
            "source_role_id": approver.source_role_id,
            "source_position_id": approver.source_position_id,
            "escalated": approver.escalated,
            "original_reference": approver.original_reference,
        }
    elif isinstance(approver, ResolvedRoleApprover):
        row["approver_role_id"] = approver.role_id
    elif isinstance(approver, ResolvedPositionApprover):
        row["approver_position_id"] = approver.position_id
        row["meta"] = {
            "escalated_to_faculty": approver.escalated_to_faculty,
            "original_reference": approver.original_reference,
        }

    return row


def build_approval_actions(step: ResolvedStep) -> List[Dict[str, Any]]:
    """Pending approval-action rows for one resolved step."""
    return [_action_row(step.index, approver) for approver in step.approvers]


async def can_user_act(
    session: AsyncSession,
    approver: ResolvedApprover,
    user: User,
    requester: Optional[Employee] = None,
) -> bool:
    """
    Act-time check: may `user` approve/reject on behalf of `approver`?

    Role and position entries are evaluated against live membership, since
    they were unresolved (or faculty-level) when the obligation was created.
    The requester never acts on their own request.
    """
    if requester is not None and user.employee_id == requester.id:
        logger.debug(f"User {user.id} is the requester; cannot act on own request")
        return False

    if isinstance(approver, ResolvedUserApprover):
        return approver.user_id == user.id

    if isinstance(approver, ResolvedRoleApprover):
        return await user_has_role(session, user.id, approver.role_id)

    if isinstance(approver, ResolvedPositionApprover):
        employee = await get_employee_for_user(session, user)
        if employee is None or employee.position_id != approver.position_id:
            return False

        if requester is not None:
            requester = await get_employee(session, requester.id)
        if requester is None:
            return True

        actor_faculty_id = effective_faculty_id(employee)
        requester_faculty_id = effective_faculty_id(requester)
        if actor_faculty_id and requester_faculty_id and actor_faculty_id != requester_faculty_id:
            logger.debug(
                f"User {user.id} holds position {approver.position_id} "
                f"but in faculty {actor_faculty_id}, not {requester_faculty_id}"
            )
            return False
        return True

    return False
