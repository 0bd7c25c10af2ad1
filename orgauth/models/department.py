from typing import Optional, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy import Enum as SAEnum

from orgauth.models.enums import DepartmentType

if TYPE_CHECKING:
    from orgauth.models.faculty import Faculty


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    # Primary Key must be ONLY inside sa_column
    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    code: Optional[str] = Field(
        default=None,
        sa_column=Column(String(32), unique=True, nullable=True)
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False)
    )

    # Administrative departments may be faculty-independent
    faculty_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("faculties.id"), nullable=True, index=True)
    )

    type: DepartmentType = Field(
        default=DepartmentType.academic,
        sa_column=Column(
            SAEnum(DepartmentType, name="department_type"),
            nullable=False,
            default=DepartmentType.academic,
        )
    )

    # The formal head, whatever its hierarchy_level.
    # positions.department_id points back here, so the FK is added after both tables exist.
    head_position_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("positions.id", use_alter=True, name="fk_departments_head_position_id"),
            nullable=True,
        )
    )

    faculty: Optional["Faculty"] = Relationship(back_populates="departments")
