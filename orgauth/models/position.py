from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Integer, String, ForeignKey

from orgauth.core.constants import LEVEL_STAFF


class Position(SQLModel, table=True):
    __tablename__ = "positions"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    code: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), unique=True, nullable=True)
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False)
    )

    # 1 = staff ... 8 = department head, 9 = associate dean, 10 = dean
    hierarchy_level: int = Field(
        default=LEVEL_STAFF,
        sa_column=Column(Integer, nullable=False, default=LEVEL_STAFF, index=True)
    )

    # NULL for faculty-level positions (dean tier)
    department_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    )

    faculty_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("faculties.id"), nullable=True, index=True)
    )
