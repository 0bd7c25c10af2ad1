# orgauth/models/training.py

from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy import Enum as SAEnum

from orgauth.models.enums import TrainingApplicationStatus


# ------------------------------------------------------------
# ALLOW-LISTS (empty = unrestricted on that dimension)
# ------------------------------------------------------------
class TrainingAllowedFaculty(SQLModel, table=True):
    __tablename__ = "training_allowed_faculties"

    training_id: int = Field(
        sa_column=Column(Integer, ForeignKey("trainings.id", ondelete="CASCADE"), primary_key=True)
    )
    faculty_id: int = Field(
        sa_column=Column(Integer, ForeignKey("faculties.id", ondelete="CASCADE"), primary_key=True)
    )


class TrainingAllowedDepartment(SQLModel, table=True):
    __tablename__ = "training_allowed_departments"

    training_id: int = Field(
        sa_column=Column(Integer, ForeignKey("trainings.id", ondelete="CASCADE"), primary_key=True)
    )
    department_id: int = Field(
        sa_column=Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), primary_key=True)
    )


class TrainingAllowedPosition(SQLModel, table=True):
    __tablename__ = "training_allowed_positions"

    training_id: int = Field(
        sa_column=Column(Integer, ForeignKey("trainings.id", ondelete="CASCADE"), primary_key=True)
    )
    position_id: int = Field(
        sa_column=Column(Integer, ForeignKey("positions.id", ondelete="CASCADE"), primary_key=True)
    )


# ------------------------------------------------------------
# TRAINING (restricted offering)
# ------------------------------------------------------------
class Training(SQLModel, table=True):
    __tablename__ = "trainings"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    title: str = Field(
        sa_column=Column(String(255), nullable=False)
    )

    # NULL = unlimited seats
    capacity: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True)
    )

    requires_approval: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False)
    )


class TrainingApplication(SQLModel, table=True):
    __tablename__ = "training_applications"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    training_id: int = Field(
        sa_column=Column(Integer, ForeignKey("trainings.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    employee_id: int = Field(
        sa_column=Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    )

    # Stored as the human readable value ("Signed Up", "No Show", ...)
    status: TrainingApplicationStatus = Field(
        default=TrainingApplicationStatus.SignedUp,
        sa_column=Column(
            SAEnum(
                TrainingApplicationStatus,
                name="training_application_status",
                values_callable=lambda enum: [member.value for member in enum],
            ),
            nullable=False,
        )
    )

    re_apply_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0)
    )
