# orgauth/api/endpoints/employees.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.api.deps import get_current_user, get_db_session
from orgauth.models.user import User
from orgauth.schemas.employee import EmployeeRead
from orgauth.schemas.scope import ScopeRead
from orgauth.services.directory_service import get_employee
from orgauth.services.scope_service import (
    can_view,
    compute_scope,
    manageable_department_ids,
    manageable_faculty_ids,
    scoped_employee_query,
)

router = APIRouter(
    prefix="/api/employees",
    tags=["Employees"]
)


# 1️⃣ Employees the caller may view
@router.get("", response_model=List[EmployeeRead])
async def list_employees(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    scope = await compute_scope(session, current_user)
    result = await session.execute(scoped_employee_query(scope))
    return result.scalars().all()


# 2️⃣ Caller's scope (for admin UIs)
@router.get("/scope", response_model=ScopeRead)
async def my_scope(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    scope = await compute_scope(session, current_user)
    return ScopeRead(
        kind=scope.kind,
        manageable_department_ids=await manageable_department_ids(session, current_user),
        manageable_faculty_ids=await manageable_faculty_ids(session, current_user),
    )


# 3️⃣ Single employee, scope-checked
@router.get("/{employee_id}", response_model=EmployeeRead)
async def read_employee(
    employee_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    employee = await get_employee(session, employee_id)
    if not employee:
        raise HTTPException(404, "Employee not found")

    if not await can_view(session, current_user, employee_id):
        raise HTTPException(403, "Not authorized to view this employee")

    return employee
