from typing import Optional, List, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, Integer, String

# Prevent circular imports
if TYPE_CHECKING:
    from orgauth.models.department import Department

class Faculty(SQLModel, table=True):
    __tablename__ = "faculties"

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

    status: str = Field(
        default="active",
        sa_column=Column(String(32), nullable=False, default="active")
    )

    # --------------------------------------------------------
    # RELATIONSHIPS
    # --------------------------------------------------------
    # Faculty-level positions (dean tier) are linked by positions.faculty_id
    departments: List["Department"] = Relationship(back_populates="faculty")
