# orgauth/models/user.py

from typing import Optional, List, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, Integer, String, ForeignKey

if TYPE_CHECKING:
    from orgauth.models.employee import Employee


class UserRoleLink(SQLModel, table=True):
    __tablename__ = "user_roles"

    user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    )
    role_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    )


class Role(SQLModel, table=True):
    __tablename__ = "roles"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    # slug, e.g. "super-admin", "hr-officer"
    name: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True)
    )

    label: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True)
    )

    users: List["User"] = Relationship(back_populates="roles", link_model=UserRoleLink)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False)
    )

    email: str = Field(
        sa_column=Column(String(255), nullable=False, unique=True, index=True)
    )

    # has-one: an employee owns at most one account
    employee_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("employees.id"), nullable=True, unique=True)
    )

    roles: List[Role] = Relationship(back_populates="users", link_model=UserRoleLink)
    employee: Optional["Employee"] = Relationship()
