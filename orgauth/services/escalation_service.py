# orgauth/services/escalation_service.py

from typing import Optional

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.core.constants import FACULTY_LEVELS, LEVEL_DEPARTMENT_HEAD
from orgauth.models.department import Department
from orgauth.models.employee import Employee
from orgauth.models.enums import DepartmentType
from orgauth.models.position import Position
from orgauth.services.directory_service import (
    first_occupant_user_id,
    get_employee,
    hierarchy_level,
)


async def escalate(session: AsyncSession, requester: Employee) -> Optional[int]:
    """
    Find the next accountable person strictly above `requester`.

    Priority (first occupied candidate with an account, never the requester):
    1. Closest higher position in the requester's department
    2. Department head (departments.head_position_id)
    3. Faculty tier: dean (10) then associate dean (9)
    4. Academic requesters only: highest head-level position of an administrative department

    Returns the user id, or None when nobody qualifies (or the requester has
    no position/department to escalate from).
    """
    requester = await get_employee(session, requester.id)
    if requester is None or requester.position is None or requester.department is None:
        return None

    department = requester.department
    level = hierarchy_level(requester)
    faculty_id = department.faculty_id

    # 1. Higher position in the same unit (closest first, not the top)
    query = select(Position).where(
        (Position.department_id == department.id) & (Position.hierarchy_level > level)
    )
    if faculty_id:
        query = query.join(Department, Position.department_id == Department.id).where(
            Department.faculty_id == faculty_id
        )
    result = await session.execute(
        query.order_by(Position.hierarchy_level.asc(), Position.id.asc()).limit(1)
    )
    higher_position = result.scalar_one_or_none()

    if higher_position:
        user_id = await first_occupant_user_id(session, higher_position.id, exclude_employee_id=requester.id)
        if user_id:
            logger.info(f"Escalated employee {requester.id} to higher position {higher_position.id} (user {user_id})")
            return user_id

    # 2. Department head
    if department.head_position_id:
        user_id = await first_occupant_user_id(
            session, department.head_position_id, exclude_employee_id=requester.id
        )
        if user_id:
            logger.info(f"Escalated employee {requester.id} to department head (user {user_id})")
            return user_id

    # 3. Faculty tier, highest level first
    if faculty_id:
        result = await session.execute(
            select(Position)
            .where(
                (Position.faculty_id == faculty_id)
                & (Position.hierarchy_level.in_(FACULTY_LEVELS))
            )
            .order_by(Position.hierarchy_level.desc(), Position.id.asc())
        )
        for faculty_position in result.scalars().all():
            user_id = await first_occupant_user_id(
                session, faculty_position.id, exclude_employee_id=requester.id
            )
            if user_id:
                logger.info(f"Escalated employee {requester.id} to faculty position {faculty_position.id} (user {user_id})")
                return user_id

    # 4. Academic unit with nobody above: hand over to administration
    if department.type == DepartmentType.academic:
        result = await session.execute(
            select(Position)
            .join(Department, Position.department_id == Department.id)
            .where(
                (Department.type == DepartmentType.administrative)
                & (Position.hierarchy_level >= LEVEL_DEPARTMENT_HEAD)
            )
            .order_by(Department.id.asc(), Position.hierarchy_level.desc(), Position.id.asc())
            .limit(1)
        )
        admin_position = result.scalar_one_or_none()

        if admin_position:
            user_id = await first_occupant_user_id(
                session, admin_position.id, exclude_employee_id=requester.id
            )
            if user_id:
                logger.info(f"Escalated employee {requester.id} to administrative position {admin_position.id} (user {user_id})")
                return user_id

    logger.warning(f"No escalation target for employee {requester.id}")
    return None
