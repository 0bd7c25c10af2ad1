# orgauth/services/directory_service.py
#
# Read-only lookups over the organizational directory. The engine services
# only go through these helpers (or plain selects) and never write.

from typing import List, Optional, Sequence

from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from orgauth.core.config import settings
from orgauth.core.constants import LEVEL_STAFF
from orgauth.models.department import Department
from orgauth.models.employee import Employee
from orgauth.models.enums import DepartmentType
from orgauth.models.position import Position
from orgauth.models.user import Role, User, UserRoleLink


# ============================================================================
# EMPLOYEES
# ============================================================================
async def get_employee(session: AsyncSession, employee_id: int) -> Employee | None:
    """Employee with `position` and `department` loaded."""
    result = await session.execute(
        select(Employee)
        .where(Employee.id == employee_id)
        .options(selectinload(Employee.position), selectinload(Employee.department))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_employee_for_user(session: AsyncSession, user: User) -> Employee | None:
    if not user.employee_id:
        return None
    return await get_employee(session, user.employee_id)


def hierarchy_level(employee: Employee) -> int:
    if employee.position is None:
        return LEVEL_STAFF
    return employee.position.hierarchy_level or LEVEL_STAFF


def effective_faculty_id(employee: Employee) -> Optional[int]:
    """Department's faculty first, else the position's (faculty-level staff)."""
    if employee.department is not None and employee.department.faculty_id:
        return employee.department.faculty_id
    if employee.position is not None and employee.position.faculty_id:
        return employee.position.faculty_id
    return None


# ============================================================================
# USERS & ROLES
# ============================================================================
async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_role_names(session: AsyncSession, user_id: int) -> List[str]:
    result = await session.execute(
        select(Role.name)
        .join(UserRoleLink, UserRoleLink.role_id == Role.id)
        .where(UserRoleLink.user_id == user_id)
        .order_by(Role.name)
    )
    return list(result.scalars().all())


async def user_has_role(session: AsyncSession, user_id: int, role_id: int) -> bool:
    result = await session.execute(
        select(UserRoleLink.user_id).where(
            (UserRoleLink.user_id == user_id) & (UserRoleLink.role_id == role_id)
        )
    )
    return result.first() is not None


async def is_super_user(session: AsyncSession, user: User) -> bool:
    names = {n.lower() for n in await get_role_names(session, user.id)}
    return any(r.lower() in names for r in settings.SUPER_ROLE_NAMES)


# ============================================================================
# POSITIONS & DEPARTMENTS
# ============================================================================
async def get_position(session: AsyncSession, position_id: int) -> Position | None:
    result = await session.execute(select(Position).where(Position.id == position_id))
    return result.scalar_one_or_none()


async def max_level_in_department(session: AsyncSession, department_id: int) -> Optional[int]:
    result = await session.execute(
        select(func.max(Position.hierarchy_level)).where(Position.department_id == department_id)
    )
    return result.scalar_one_or_none()


async def max_level_in_faculty_tier(session: AsyncSession, faculty_id: int) -> Optional[int]:
    """Highest level among department-less positions of a faculty."""
    result = await session.execute(
        select(func.max(Position.hierarchy_level)).where(
            (Position.faculty_id == faculty_id) & (Position.department_id.is_(None))
        )
    )
    return result.scalar_one_or_none()


async def academic_department_ids(session: AsyncSession, faculty_id: int) -> List[int]:
    result = await session.execute(
        select(Department.id)
        .where(
            (Department.faculty_id == faculty_id)
            & (Department.type == DepartmentType.academic)
        )
        .order_by(Department.id)
    )
    return list(result.scalars().all())


async def department_ids_in_faculty(
    session: AsyncSession, department_ids: Sequence[int], faculty_id: int
) -> List[int]:
    if not department_ids:
        return []
    result = await session.execute(
        select(Department.id).where(
            Department.id.in_(list(department_ids)) & (Department.faculty_id == faculty_id)
        )
    )
    return list(result.scalars().all())


# ============================================================================
# OCCUPANTS
# ============================================================================
async def first_occupant_user_id(
    session: AsyncSession,
    position_id: int,
    exclude_employee_id: Optional[int] = None,
    department_id: Optional[int] = None,
    faculty_id: Optional[int] = None,
) -> Optional[int]:
    """
    User id of the first employee (by id) holding `position_id` who has an
    account. Optionally restricted to a department and that department's faculty.
    """
    query = (
        select(User.id)
        .join(Employee, User.employee_id == Employee.id)
        .where(Employee.position_id == position_id)
    )
    if exclude_employee_id is not None:
        query = query.where(Employee.id != exclude_employee_id)
    if department_id is not None:
        query = query.where(Employee.department_id == department_id)
    if faculty_id is not None:
        query = query.join(Department, Employee.department_id == Department.id).where(
            Department.faculty_id == faculty_id
        )

    result = await session.execute(query.order_by(Employee.id, User.id).limit(1))
    return result.scalar_one_or_none()
