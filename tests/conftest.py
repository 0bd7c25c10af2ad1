import os
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Settings are read at import time, so the environment must be set
# BEFORE anything from orgauth is imported.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["INIT_DB_ON_STARTUP"] = "false"

from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orgauth.api.deps import get_db_session
from orgauth.core.security import create_access_token
from orgauth.main import app
from orgauth.models.department import Department
from orgauth.models.employee import Employee
from orgauth.models.enums import DepartmentType, TrainingApplicationStatus
from orgauth.models.faculty import Faculty
from orgauth.models.position import Position
from orgauth.models.training import (
    Training,
    TrainingAllowedDepartment,
    TrainingAllowedFaculty,
    TrainingAllowedPosition,
    TrainingApplication,
)
from orgauth.models.user import Role, User, UserRoleLink


# ------------------------------------------------------------------
# DATABASE (fresh in-memory sqlite per test)
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session):
    """httpx >= 0.27: ASGITransport instead of app=..."""

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_db_session] = _override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


# ------------------------------------------------------------------
# BUILDER (ad-hoc organizational data)
# ------------------------------------------------------------------
class OrgBuilder:
    def __init__(self, session: AsyncSession):
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        return obj

    async def faculty(self, name: str) -> Faculty:
        return await self._save(Faculty(name=name))

    async def department(
        self,
        name: str,
        faculty: Faculty | None = None,
        type: DepartmentType = DepartmentType.academic,
    ) -> Department:
        return await self._save(
            Department(name=name, faculty_id=faculty.id if faculty else None, type=type)
        )

    async def position(
        self,
        name: str,
        level: int,
        department: Department | None = None,
        faculty: Faculty | None = None,
    ) -> Position:
        return await self._save(
            Position(
                name=name,
                hierarchy_level=level,
                department_id=department.id if department else None,
                faculty_id=faculty.id if faculty else None,
            )
        )

    async def set_head(self, department: Department, position: Position) -> Department:
        department.head_position_id = position.id
        return await self._save(department)

    async def employee(
        self,
        first_name: str,
        position: Position | None = None,
        department: Department | None = None,
    ) -> Employee:
        return await self._save(
            Employee(
                first_name=first_name,
                surname="Test",
                position_id=position.id if position else None,
                department_id=department.id if department else None,
            )
        )

    async def user(self, name: str, employee: Employee | None = None) -> User:
        return await self._save(
            User(
                name=name,
                email=f"{name.lower().replace(' ', '.')}.{self._next()}@example.edu",
                employee_id=employee.id if employee else None,
            )
        )

    async def staff(self, first_name: str, position: Position, department: Department | None = None):
        """Employee plus their account."""
        employee = await self.employee(first_name, position, department)
        user = await self.user(first_name, employee)
        return employee, user

    async def role(self, name: str, *members: User) -> Role:
        role = await self._save(Role(name=name))
        for member in members:
            self.session.add(UserRoleLink(user_id=member.id, role_id=role.id))
        await self.session.commit()
        return role

    async def training(
        self,
        title: str = "Training",
        capacity: int | None = None,
        requires_approval: bool = False,
        faculties=(),
        departments=(),
        positions=(),
    ) -> Training:
        training = await self._save(
            Training(title=title, capacity=capacity, requires_approval=requires_approval)
        )
        for f in faculties:
            self.session.add(TrainingAllowedFaculty(training_id=training.id, faculty_id=f.id))
        for d in departments:
            self.session.add(TrainingAllowedDepartment(training_id=training.id, department_id=d.id))
        for p in positions:
            self.session.add(TrainingAllowedPosition(training_id=training.id, position_id=p.id))
        await self.session.commit()
        return training

    async def application(
        self,
        training: Training,
        employee: Employee,
        status: TrainingApplicationStatus = TrainingApplicationStatus.SignedUp,
        re_apply_count: int = 0,
    ) -> TrainingApplication:
        return await self._save(
            TrainingApplication(
                training_id=training.id,
                employee_id=employee.id,
                status=status,
                re_apply_count=re_apply_count,
            )
        )


@pytest_asyncio.fixture
async def build(db_session):
    return OrgBuilder(db_session)


# ------------------------------------------------------------------
# SHARED ORGANIZATION
#
#   Faculty F: academic X (lecturer 2, professor 5, head 8 = X head),
#              administrative Z (admin officer 4),
#              dean 10 + associate dean 9 (no department)
#   Faculty G: academic Y (physics lecturer 2)
#   No faculty: administrative A (HR staff 3, HR director 8)
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def org(build):
    o = SimpleNamespace()

    o.F = await build.faculty("Faculty of Science")
    o.G = await build.faculty("Faculty of Engineering")

    o.X = await build.department("Mathematics", o.F)
    o.Y = await build.department("Physics", o.G)
    o.A = await build.department("Human Resources", None, DepartmentType.administrative)
    o.Z = await build.department("Science Faculty Office", o.F, DepartmentType.administrative)

    o.lecturer_pos = await build.position("Lecturer", 2, o.X)
    o.professor_pos = await build.position("Professor", 5, o.X)
    o.head_pos = await build.position("Head of Mathematics", 8, o.X)
    await build.set_head(o.X, o.head_pos)

    o.dean_pos = await build.position("Dean of Science", 10, faculty=o.F)
    o.assoc_pos = await build.position("Associate Dean of Science", 9, faculty=o.F)

    o.physics_pos = await build.position("Physics Lecturer", 2, o.Y)
    o.hr_staff_pos = await build.position("HR Staff", 3, o.A)
    o.hr_director_pos = await build.position("HR Director", 8, o.A)
    o.admin_officer_pos = await build.position("Admin Officer", 4, o.Z)

    o.lecturer, o.lecturer_user = await build.staff("Lena", o.lecturer_pos, o.X)
    o.lecturer2, o.lecturer2_user = await build.staff("Lars", o.lecturer_pos, o.X)
    o.professor, o.professor_user = await build.staff("Petra", o.professor_pos, o.X)
    o.head, o.head_user = await build.staff("Hugo", o.head_pos, o.X)
    o.dean, o.dean_user = await build.staff("Diana", o.dean_pos)
    o.assoc, o.assoc_user = await build.staff("Aaron", o.assoc_pos)
    o.physicist, o.physicist_user = await build.staff("Fermi", o.physics_pos, o.Y)
    o.hr_staff, o.hr_staff_user = await build.staff("Hana", o.hr_staff_pos, o.A)
    o.hr_director, o.hr_director_user = await build.staff("Hector", o.hr_director_pos, o.A)
    o.admin_officer, o.admin_officer_user = await build.staff("Olga", o.admin_officer_pos, o.Z)

    o.admin_user = await build.user("System Admin")
    o.admin_role = await build.role("admin", o.admin_user)
    o.reviewer_role = await build.role("reviewer", o.professor_user, o.lecturer2_user)

    return o
