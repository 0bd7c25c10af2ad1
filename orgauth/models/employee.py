# orgauth/models/employee.py

from typing import Optional, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, Integer, String, ForeignKey

if TYPE_CHECKING:
    from orgauth.models.department import Department
    from orgauth.models.position import Position


class Employee(SQLModel, table=True):
    __tablename__ = "employees"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    first_name: str = Field(
        sa_column=Column(String(128), nullable=False)
    )

    surname: str = Field(
        sa_column=Column(String(128), nullable=False)
    )

    # No position -> level 1, no authority
    position_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("positions.id"), nullable=True, index=True)
    )

    # Faculty-level employees (deans) have no department
    department_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    )

    # --------------------------------------------------------
    # RELATIONSHIPS (load explicitly, see directory_service)
    # --------------------------------------------------------
    position: Optional["Position"] = Relationship()
    department: Optional["Department"] = Relationship()
