# orgauth/services/approver_service.py

from typing import Dict, List, Optional, Sequence

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.core.constants import FACULTY_LEVELS
from orgauth.models.department import Department
from orgauth.models.employee import Employee
from orgauth.models.position import Position
from orgauth.models.user import User, UserRoleLink
from orgauth.schemas.approver import (
    ApprovalStep,
    ApproverConfig,
    ApproverType,
    DedupKey,
    PositionApproverConfig,
    ResolvedApprover,
    ResolvedPositionApprover,
    ResolvedRoleApprover,
    ResolvedStep,
    ResolvedUserApprover,
    RoleApproverConfig,
    UserApproverConfig,
)
from orgauth.schemas.training import OfferingRestrictions
from orgauth.services.directory_service import (
    effective_faculty_id,
    first_occupant_user_id,
    get_employee,
    get_position,
    get_user_by_id,
    hierarchy_level,
    max_level_in_department,
    max_level_in_faculty_tier,
)
from orgauth.services.escalation_service import escalate


# ============================================================================
# HIERARCHY HELPERS
# ============================================================================
async def is_at_max_level(session: AsyncSession, requester: Employee) -> bool:
    """
    True when nobody in the requester's unit ranks above them. The unit is the
    department, or for department-less staff the faculty tier of their faculty.
    """
    if requester.position is None:
        return False

    if requester.department_id:
        max_level = await max_level_in_department(session, requester.department_id)
    elif requester.position.faculty_id:
        # Department-less staff (deans) are ranked within their faculty tier
        max_level = await max_level_in_faculty_tier(session, requester.position.faculty_id)
    else:
        max_level = None

    if not max_level:
        return False
    return hierarchy_level(requester) >= max_level


async def faculty_level_position(session: AsyncSession, requester: Employee) -> Optional[Position]:
    """Department-less dean-tier position of the requester's faculty, dean first."""
    faculty_id = effective_faculty_id(requester)
    if not faculty_id:
        return None

    result = await session.execute(
        select(Position)
        .where(
            (Position.faculty_id == faculty_id)
            & (Position.department_id.is_(None))
            & (Position.hierarchy_level.in_(FACULTY_LEVELS))
        )
        .order_by(Position.hierarchy_level.desc(), Position.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


# ============================================================================
# SELF-APPROVAL
# ============================================================================
async def _handle_self_approval(
    session: AsyncSession,
    requester: Employee,
    original_reference: int,
    resolved_from: ApproverType,
    source_position_id: Optional[int] = None,
) -> Optional[ResolvedApprover]:
    """Replacement for an approver that turned out to be the requester, or None."""
    if await is_at_max_level(session, requester):
        position = await faculty_level_position(session, requester)
        if position:
            logger.info(
                f"Requester {requester.id} is top of their unit; "
                f"approval goes to faculty position {position.id}"
            )
            return ResolvedPositionApprover(
                position_id=position.id,
                escalated_to_faculty=True,
                original_reference=original_reference,
            )

    user_id = await escalate(session, requester)
    if user_id is None:
        logger.warning(
            f"Dropping {resolved_from.value} approver {original_reference}: "
            f"it is the requester {requester.id} and nobody is above them"
        )
        return None

    return ResolvedUserApprover(
        user_id=user_id,
        resolved_from=resolved_from,
        source_position_id=source_position_id,
        escalated=True,
        original_reference=original_reference,
    )


# ============================================================================
# PER-TYPE RESOLUTION
# ============================================================================
async def _resolve_user(
    session: AsyncSession, config: UserApproverConfig, requester: Employee
) -> List[ResolvedApprover]:
    user = await get_user_by_id(session, config.user_id)
    if user is not None and user.employee_id == requester.id:
        replacement = await _handle_self_approval(
            session, requester, config.user_id, ApproverType.user
        )
        return [replacement] if replacement else []

    return [ResolvedUserApprover(user_id=config.user_id)]


async def _role_member_user_ids(session: AsyncSession, role_id: int, requester: Employee) -> List[int]:
    if requester.department is None:
        return []

    query = (
        select(User.id)
        .join(UserRoleLink, UserRoleLink.user_id == User.id)
        .join(Employee, User.employee_id == Employee.id)
        .where(
            (UserRoleLink.role_id == role_id)
            & (Employee.department_id == requester.department_id)
            & (Employee.id != requester.id)
        )
    )
    faculty_id = requester.department.faculty_id
    if faculty_id:
        query = query.join(Department, Employee.department_id == Department.id).where(
            Department.faculty_id == faculty_id
        )

    result = await session.execute(query.order_by(User.id))
    return list(result.scalars().all())


async def _resolve_role(
    session: AsyncSession, config: RoleApproverConfig, requester: Employee
) -> List[ResolvedApprover]:
    user_ids = await _role_member_user_ids(session, config.role_id, requester)
    if not user_ids:
        # Checked against live membership when someone tries to act
        logger.debug(f"Role {config.role_id} has no member near employee {requester.id}; passing through")
        return [ResolvedRoleApprover(role_id=config.role_id)]

    return [
        ResolvedUserApprover(
            user_id=user_id,
            resolved_from=ApproverType.role,
            source_role_id=config.role_id,
        )
        for user_id in user_ids
    ]


def _position_allowed(
    position: Position,
    allowed_faculty_ids: Optional[Sequence[int]],
    allowed_department_ids: Optional[Sequence[int]],
) -> bool:
    if not allowed_faculty_ids and not allowed_department_ids:
        return True

    if allowed_faculty_ids and position.faculty_id and position.faculty_id in allowed_faculty_ids:
        return True
    if allowed_department_ids and position.department_id and position.department_id in allowed_department_ids:
        return True
    return False


async def _resolve_position(
    session: AsyncSession,
    config: PositionApproverConfig,
    requester: Employee,
    allowed_faculty_ids: Optional[Sequence[int]],
    allowed_department_ids: Optional[Sequence[int]],
) -> List[ResolvedApprover]:
    position = await get_position(session, config.position_id)
    if position is None:
        logger.warning(f"Approver position {config.position_id} does not exist; skipping")
        return []

    if not _position_allowed(position, allowed_faculty_ids, allowed_department_ids):
        logger.warning(f"Approver position {position.id} is outside the offering's restrictions; skipping")
        return []

    user_id = None
    if requester.department is not None:
        user_id = await first_occupant_user_id(
            session,
            position.id,
            exclude_employee_id=requester.id,
            department_id=requester.department_id,
            faculty_id=requester.department.faculty_id,
        )

    if user_id:
        return [
            ResolvedUserApprover(
                user_id=user_id,
                resolved_from=ApproverType.position,
                source_position_id=position.id,
            )
        ]

    if requester.position_id and position.id == requester.position_id:
        replacement = await _handle_self_approval(
            session,
            requester,
            position.id,
            ApproverType.position,
            source_position_id=position.id,
        )
        return [replacement] if replacement else []

    logger.debug(f"Position {position.id} has no occupant near employee {requester.id}; passing through")
    return [ResolvedPositionApprover(position_id=position.id)]


# ============================================================================
# RESOLVER
# ============================================================================
def deduplicate(approvers: Sequence[ResolvedApprover]) -> List[ResolvedApprover]:
    """First occurrence wins, input order kept."""
    seen: Dict[DedupKey, bool] = {}
    unique: List[ResolvedApprover] = []
    for approver in approvers:
        key = approver.dedup_key
        if key in seen:
            continue
        seen[key] = True
        unique.append(approver)
    return unique


async def resolve_approvers(
    session: AsyncSession,
    approvers: Sequence[ApproverConfig],
    requester: Employee,
    allowed_faculty_ids: Optional[Sequence[int]] = None,
    allowed_department_ids: Optional[Sequence[int]] = None,
) -> List[ResolvedApprover]:
    """
    Expand configured approvers into concrete obligations for `requester`.

    Role and position configs are narrowed to the requester's department (and
    faculty). Anything that lands on the requester is escalated, and the result
    is deduplicated. The allow-lists only narrow position configs.
    """
    requester = await get_employee(session, requester.id)
    if requester is None:
        return []

    resolved: List[ResolvedApprover] = []
    for config in approvers:
        if isinstance(config, UserApproverConfig):
            resolved.extend(await _resolve_user(session, config, requester))
        elif isinstance(config, RoleApproverConfig):
            resolved.extend(await _resolve_role(session, config, requester))
        elif isinstance(config, PositionApproverConfig):
            resolved.extend(
                await _resolve_position(
                    session, config, requester, allowed_faculty_ids, allowed_department_ids
                )
            )

    return deduplicate(resolved)


async def resolve_approval_steps(
    session: AsyncSession,
    steps: Sequence[ApprovalStep],
    requester: Employee,
    restrictions: Optional[OfferingRestrictions] = None,
) -> List[ResolvedStep]:
    allowed_faculty_ids = sorted(restrictions.faculty_ids) if restrictions else None
    allowed_department_ids = sorted(restrictions.department_ids) if restrictions else None

    resolved_steps: List[ResolvedStep] = []
    for index, step in enumerate(steps):
        if not step.approvers:
            continue

        approvers = await resolve_approvers(
            session,
            step.approvers,
            requester,
            allowed_faculty_ids=allowed_faculty_ids,
            allowed_department_ids=allowed_department_ids,
        )

        needs_attention = not approvers
        if needs_attention:
            logger.warning(
                f"Approval step {index} ('{step.name}') resolved to no approvers "
                f"for employee {requester.id}"
            )

        resolved_steps.append(
            ResolvedStep(index=index, name=step.name, approvers=approvers, needs_attention=needs_attention)
        )

    return resolved_steps
