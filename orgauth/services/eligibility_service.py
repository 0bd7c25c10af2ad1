# orgauth/services/eligibility_service.py

from typing import Optional

from loguru import logger
from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.core.config import settings
from orgauth.core.constants import COUNTED_APPLICATION_STATUSES
from orgauth.models.employee import Employee
from orgauth.models.training import (
    Training,
    TrainingAllowedDepartment,
    TrainingAllowedFaculty,
    TrainingAllowedPosition,
    TrainingApplication,
)
from orgauth.schemas.training import EnrollmentBlock, EnrollmentDecision, OfferingRestrictions
from orgauth.services.directory_service import (
    department_ids_in_faculty,
    effective_faculty_id,
    get_employee,
)


async def get_restrictions(session: AsyncSession, training_id: int) -> OfferingRestrictions:
    faculties = await session.execute(
        select(TrainingAllowedFaculty.faculty_id).where(TrainingAllowedFaculty.training_id == training_id)
    )
    departments = await session.execute(
        select(TrainingAllowedDepartment.department_id).where(TrainingAllowedDepartment.training_id == training_id)
    )
    positions = await session.execute(
        select(TrainingAllowedPosition.position_id).where(TrainingAllowedPosition.training_id == training_id)
    )
    return OfferingRestrictions(
        faculty_ids=frozenset(faculties.scalars().all()),
        department_ids=frozenset(departments.scalars().all()),
        position_ids=frozenset(positions.scalars().all()),
    )


# ============================================================================
# ELIGIBILITY (faculty AND department AND position)
# ============================================================================
async def is_eligible(
    session: AsyncSession,
    restrictions: OfferingRestrictions,
    employee: Optional[Employee],
) -> bool:
    if employee is None:
        return False

    employee = await get_employee(session, employee.id)
    if employee is None:
        return False

    faculty_id = effective_faculty_id(employee)

    faculty_match = not restrictions.faculty_ids or (
        faculty_id is not None and faculty_id in restrictions.faculty_ids
    )

    department_match = await _department_match(session, restrictions, employee, faculty_id)

    position_match = not restrictions.position_ids or (
        employee.position_id is not None and employee.position_id in restrictions.position_ids
    )

    logger.debug(
        f"Eligibility for employee {employee.id}: faculty={faculty_match} "
        f"department={department_match} position={position_match}"
    )
    return faculty_match and department_match and position_match


async def _department_match(
    session: AsyncSession,
    restrictions: OfferingRestrictions,
    employee: Employee,
    faculty_id: Optional[int],
) -> bool:
    if not restrictions.department_ids:
        return True

    if employee.department_id:
        return employee.department_id in restrictions.department_ids

    # Faculty-level employee: any allowed department under their faculty will do
    if faculty_id:
        matches = await department_ids_in_faculty(
            session, sorted(restrictions.department_ids), faculty_id
        )
        return bool(matches)

    return False


# ============================================================================
# CAPACITY
# ============================================================================
async def count_counted_applications(session: AsyncSession, training_id: int) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(TrainingApplication)
        .where(
            (TrainingApplication.training_id == training_id)
            & (TrainingApplication.status.in_(COUNTED_APPLICATION_STATUSES))
        )
    )
    return result.scalar_one()


async def has_capacity(session: AsyncSession, training: Training) -> bool:
    if training.capacity is None:
        return True
    return await count_counted_applications(session, training.id) < training.capacity


async def available_spots(session: AsyncSession, training: Training) -> Optional[int]:
    """None when unlimited."""
    if training.capacity is None:
        return None
    taken = await count_counted_applications(session, training.id)
    return max(0, training.capacity - taken)


# ============================================================================
# ENROLLMENT (eligibility + capacity + re-apply limit)
# ============================================================================
async def has_reached_reapply_limit(session: AsyncSession, training: Training, employee: Employee) -> bool:
    result = await session.execute(
        select(TrainingApplication.re_apply_count)
        .where(
            (TrainingApplication.training_id == training.id)
            & (TrainingApplication.employee_id == employee.id)
        )
        .order_by(TrainingApplication.id)
        .limit(1)
    )
    count = result.scalar_one_or_none()
    return count is not None and count >= settings.TRAINING_MAX_REAPPLY_ATTEMPTS


async def check_enrollment(
    session: AsyncSession,
    training: Training,
    employee: Optional[Employee],
) -> EnrollmentDecision:
    restrictions = await get_restrictions(session, training.id)
    spots = await available_spots(session, training)

    if not await is_eligible(session, restrictions, employee):
        return EnrollmentDecision(allowed=False, reason=EnrollmentBlock.not_eligible, available_spots=spots)

    if not await has_capacity(session, training):
        return EnrollmentDecision(allowed=False, reason=EnrollmentBlock.full, available_spots=spots)

    if training.requires_approval and await has_reached_reapply_limit(session, training, employee):
        return EnrollmentDecision(
            allowed=False, reason=EnrollmentBlock.reapply_limit_reached, available_spots=spots
        )

    return EnrollmentDecision(allowed=True, available_spots=spots)
