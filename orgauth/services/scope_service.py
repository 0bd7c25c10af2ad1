# orgauth/services/scope_service.py

from typing import List, Optional

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.core.constants import FACULTY_LEVELS, LEVEL_DEPARTMENT_HEAD
from orgauth.models.employee import Employee
from orgauth.models.user import User
from orgauth.schemas.scope import EmployeeScope, ScopeKind
from orgauth.services.directory_service import (
    academic_department_ids,
    effective_faculty_id,
    get_employee_for_user,
    hierarchy_level,
    is_super_user,
)

NO_ACCESS = EmployeeScope(kind=ScopeKind.none)


async def compute_scope(session: AsyncSession, user: User) -> EmployeeScope:
    """
    Which employee records `user` may view/manage (first match wins):

    - super-admin / admin: everything
    - dean tier (levels 9-10): academic departments + faculty-level positions of their faculty
    - department head (level 8, or holder of the department's head position): their department
    - everybody else: themselves
    """
    if await is_super_user(session, user):
        return EmployeeScope(kind=ScopeKind.all)

    employee = await get_employee_for_user(session, user)
    if employee is None or employee.position is None:
        return NO_ACCESS

    level = hierarchy_level(employee)

    if level in FACULTY_LEVELS:
        faculty_id = effective_faculty_id(employee)
        if not faculty_id:
            logger.debug(f"Dean-tier employee {employee.id} has no faculty; no access")
            return NO_ACCESS
        return EmployeeScope(kind=ScopeKind.faculty, faculty_id=faculty_id)

    heads_department = (
        employee.department is not None
        and employee.department.head_position_id == employee.position_id
    )
    if level == LEVEL_DEPARTMENT_HEAD or heads_department:
        if not employee.department_id:
            return NO_ACCESS
        return EmployeeScope(kind=ScopeKind.department, department_id=employee.department_id)

    return EmployeeScope(kind=ScopeKind.self, employee_id=employee.id)


def scoped_employee_query(scope: EmployeeScope):
    query = select(Employee)
    clause = scope.clause()
    if clause is not None:
        query = query.where(clause)
    return query.order_by(Employee.id)


async def can_view(session: AsyncSession, user: User, target_employee_id: int) -> bool:
    scope = await compute_scope(session, user)
    if scope.is_unrestricted:
        return True

    result = await session.execute(
        select(Employee.id).where((Employee.id == target_employee_id) & scope.clause())
    )
    return result.first() is not None


async def manageable_department_ids(session: AsyncSession, user: User) -> Optional[List[int]]:
    """None = unrestricted, [] = none."""
    scope = await compute_scope(session, user)

    if scope.kind == ScopeKind.all:
        return None
    if scope.kind == ScopeKind.faculty:
        return await academic_department_ids(session, scope.faculty_id)
    if scope.kind == ScopeKind.department:
        return [scope.department_id]
    return []


async def manageable_faculty_ids(session: AsyncSession, user: User) -> Optional[List[int]]:
    """None = unrestricted, [] = none."""
    scope = await compute_scope(session, user)

    if scope.kind == ScopeKind.all:
        return None
    if scope.kind == ScopeKind.faculty:
        return [scope.faculty_id]
    return []
