from enum import Enum
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import and_, false, or_, select
from sqlalchemy.sql.elements import ColumnElement

from orgauth.models.department import Department
from orgauth.models.employee import Employee
from orgauth.models.enums import DepartmentType
from orgauth.models.position import Position


class ScopeKind(str, Enum):
    all = "all"
    none = "none"
    faculty = "faculty"
    department = "department"
    self = "self"


class EmployeeScope(BaseModel):
    """
    The set of employee records an actor may view/manage.

    `all` is unrestricted; every other kind renders to a WHERE clause over
    the employees table via `clause()`.
    """
    kind: ScopeKind
    faculty_id: Optional[int] = None
    department_id: Optional[int] = None
    employee_id: Optional[int] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.kind == ScopeKind.all

    def clause(self) -> Optional[ColumnElement]:
        if self.kind == ScopeKind.all:
            return None

        if self.kind == ScopeKind.faculty:
            # Academic departments only; administrative ones are never dean territory
            academic_departments = select(Department.id).where(
                and_(
                    Department.faculty_id == self.faculty_id,
                    Department.type == DepartmentType.academic,
                )
            )
            faculty_positions = select(Position.id).where(
                and_(
                    Position.faculty_id == self.faculty_id,
                    Position.department_id.is_(None),
                )
            )
            return or_(
                Employee.department_id.in_(academic_departments),
                Employee.position_id.in_(faculty_positions),
            )

        if self.kind == ScopeKind.department:
            return Employee.department_id == self.department_id

        if self.kind == ScopeKind.self:
            return Employee.id == self.employee_id

        return false()


class ScopeRead(BaseModel):
    kind: ScopeKind
    manageable_department_ids: Optional[List[int]]
    manageable_faculty_ids: Optional[List[int]]
