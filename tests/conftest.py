# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across the test suite:
- An in-memory SQLite database built from the model metadata
- One employee (and matching principal) per staff role
- A Seeder for inserting rows directly, bypassing the services
"""

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.core.config import EnrollmentSettings
from src.domains.auth import Principal
from src.infrastructure.database import build_engine
from src.infrastructure.database.models import (
    Base,
    Batch,
    Company,
    Course,
    Employee,
    Lead,
    Student,
    StudentStatusHistory,
)
from src.models.common import BatchStatus, LeadStatus, Role, StudentStatus
from src.utils.datetime import add_months


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessionmaker configured like the application's."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on the test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def enrollment_settings() -> EnrollmentSettings:
    """Enrollment settings with the default numbering scheme."""
    return EnrollmentSettings()


# =============================================================================
# Staff Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def staff(db_session: AsyncSession) -> dict[Role, Employee]:
    """One active employee per role."""
    employees = {}
    for index, role in enumerate(Role, start=1):
        employee = Employee(
            employee_code=f"EMP{index:03d}",
            first_name=role.value.title(),
            last_name="Staff",
            email=f"{role.value.lower()}@institute.test",
            phone=f"98765432{index:02d}",
            role=role,
        )
        db_session.add(employee)
        employees[role] = employee

    await db_session.commit()
    return employees


@pytest.fixture
def principals(staff: dict[Role, Employee]) -> dict[Role, Principal]:
    """Principal for each seeded employee."""
    return {role: Principal(employee_id=employee.id, role=role) for role, employee in staff.items()}


@pytest.fixture
def admin(principals: dict[Role, Principal]) -> Principal:
    return principals[Role.ADMIN]


@pytest.fixture
def counsellor(principals: dict[Role, Principal]) -> Principal:
    return principals[Role.COUNSELLOR]


# =============================================================================
# Seed Data
# =============================================================================


class Seeder:
    """Inserts rows directly so tests can start from any state."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, entity: Any) -> Any:
        self.session.add(entity)
        await self.session.commit()
        return entity

    async def course(self, duration_months: int = 6, **fields: Any) -> Course:
        n = self._next()
        return await self._save(
            Course(
                name=fields.pop("name", f"Course {n}"),
                duration_months=duration_months,
                fees=fields.pop("fees", Decimal("45000.00")),
                **fields,
            )
        )

    async def batch(
        self,
        course: Course | None = None,
        capacity: int = 30,
        current_enrollment: int = 0,
        **fields: Any,
    ) -> Batch:
        course = course or await self.course()
        n = self._next()
        start = fields.pop("start_date", date(2024, 1, 15))
        return await self._save(
            Batch(
                name=fields.pop("name", f"Batch {n}"),
                course_id=course.id,
                start_date=start,
                end_date=add_months(start, course.duration_months),
                capacity=capacity,
                current_enrollment=current_enrollment,
                status=fields.pop("status", BatchStatus.PLANNED),
                **fields,
            )
        )

    async def student(self, batch: Batch | None = None, **fields: Any) -> Student:
        n = self._next()
        student = Student(
            enrollment_number=fields.pop("enrollment_number", f"SEED{n:07d}"),
            first_name=fields.pop("first_name", "Seeded"),
            last_name=fields.pop("last_name", f"Student{n}"),
            email=fields.pop("email", f"student{n}@example.com"),
            phone=fields.pop("phone", f"91000000{n:02d}"),
            status=fields.pop("status", StudentStatus.ACTIVE),
            enrollment_date=fields.pop("enrollment_date", date(2024, 1, 10)),
            batch_id=batch.id if batch else None,
            **fields,
        )
        student.status_history.append(
            StudentStatusHistory(status=student.status, notes="Student enrolled")
        )
        return await self._save(student)

    async def lead(self, status: LeadStatus = LeadStatus.NEW, **fields: Any) -> Lead:
        n = self._next()
        return await self._save(
            Lead(
                first_name=fields.pop("first_name", "Prospect"),
                last_name=fields.pop("last_name", f"Lead{n}"),
                email=fields.pop("email", f"lead{n}@example.com"),
                phone=fields.pop("phone", f"92000000{n:02d}"),
                status=status,
                **fields,
            )
        )

    async def company(self, **fields: Any) -> Company:
        n = self._next()
        return await self._save(
            Company(
                name=fields.pop("name", f"Acme {n}"),
                email=fields.pop("email", f"hr{n}@acme.test"),
                **fields,
            )
        )


@pytest.fixture
def seed(db_session: AsyncSession) -> Seeder:
    """Seeder bound to the test session."""
    return Seeder(db_session)
