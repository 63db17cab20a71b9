# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for PlacementService."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from src.domains.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from src.domains.placement.service import PlacementService
from src.infrastructure.database.models import Placement
from src.models.common import EmploymentType, JobType, PlacementStatus, Role
from src.models.placement import PlacementCreateRequest, PlacementUpdateRequest


@pytest.fixture
def service(db_session):
    return PlacementService(db_session)


@pytest.fixture
def officer(principals):
    return principals[Role.PLACEMENT_OFFICER]


def new_placement(student, company, **fields) -> PlacementCreateRequest:
    defaults = {
        "student_id": student.id,
        "company_id": company.id,
        "position": "Junior Developer",
        "salary": Decimal("420000"),
        "placement_date": date(2024, 6, 1),
    }
    defaults.update(fields)
    return PlacementCreateRequest(**defaults)


class TestCreatePlacement:
    """Tests for create_placement."""

    @pytest.mark.asyncio
    async def test_create_placement(self, service, seed, officer):
        student, company = await seed.student(), await seed.company()

        placement = await service.create_placement(
            officer,
            new_placement(
                student,
                company,
                job_type=JobType.FULL_TIME,
                employment_type=EmploymentType.PERMANENT,
                joining_date=date(2024, 7, 1),
                probation_months=6,
            ),
        )

        assert placement.status == PlacementStatus.PLACED
        assert placement.student_id == student.id
        assert placement.company_id == company.id
        assert placement.is_in_probation(as_of=date(2024, 12, 31)) is True
        assert placement.is_in_probation(as_of=date(2025, 1, 1)) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields,message",
        [
            ({"salary": Decimal("0")}, "salary must be positive"),
            ({"salary": Decimal("-1")}, "salary must be positive"),
            ({"position": "  "}, "position is required"),
            ({"probation_months": 25}, "probation_months must be between 0 and 24"),
            (
                {"joining_date": date(2024, 7, 1), "end_date": date(2024, 6, 30)},
                "end_date cannot be before joining_date",
            ),
        ],
    )
    async def test_invalid_fields(self, service, seed, officer, fields, message):
        student, company = await seed.student(), await seed.company()

        with pytest.raises(ValidationError, match=message):
            await service.create_placement(officer, new_placement(student, company, **fields))

    @pytest.mark.asyncio
    async def test_unknown_student(self, service, seed, officer):
        company = await seed.company()
        request = PlacementCreateRequest(
            student_id=uuid4(),
            company_id=company.id,
            position="Analyst",
            placement_date=date(2024, 6, 1),
        )

        with pytest.raises(ResourceNotFoundError, match="Student not found"):
            await service.create_placement(officer, request)

    @pytest.mark.asyncio
    async def test_unknown_company(self, service, seed, officer, db_session):
        student = await seed.student()
        request = PlacementCreateRequest(
            student_id=student.id,
            company_id=uuid4(),
            position="Analyst",
            placement_date=date(2024, 6, 1),
        )

        with pytest.raises(ResourceNotFoundError, match="Company not found"):
            await service.create_placement(officer, request)

        count = (await db_session.execute(select(func.count()).select_from(Placement))).scalar()
        assert count == 0

    @pytest.mark.asyncio
    async def test_counsellor_denied(self, service, seed, counsellor):
        student, company = await seed.student(), await seed.company()

        with pytest.raises(AuthorizationError):
            await service.create_placement(counsellor, new_placement(student, company))


class TestUpdatePlacement:
    """Tests for updates and status changes."""

    @pytest.mark.asyncio
    async def test_any_status_may_follow_any_other(self, service, seed, officer):
        student, company = await seed.student(), await seed.company()
        placement = await service.create_placement(officer, new_placement(student, company))

        for status in (
            PlacementStatus.RESIGNED,
            PlacementStatus.PLACED,
            PlacementStatus.TERMINATED,
            PlacementStatus.COMPLETED,
        ):
            placement = await service.update_placement_status(officer, placement.id, status)
            assert placement.status == status

    @pytest.mark.asyncio
    async def test_end_date_checked_against_stored_joining_date(self, service, seed, officer):
        student, company = await seed.student(), await seed.company()
        placement = await service.create_placement(
            officer, new_placement(student, company, joining_date=date(2024, 7, 1))
        )

        with pytest.raises(ValidationError):
            await service.update_placement(
                officer, placement.id, PlacementUpdateRequest(end_date=date(2024, 1, 1))
            )

        updated = await service.update_placement(
            officer, placement.id, PlacementUpdateRequest(end_date=date(2025, 7, 1))
        )
        assert updated.end_date == date(2025, 7, 1)
        assert updated.tenure_in_months(as_of=date(2026, 1, 1)) == 12

    @pytest.mark.asyncio
    async def test_list_and_delete(self, service, seed, officer, admin):
        student, company = await seed.student(), await seed.company()
        older = await service.create_placement(
            officer, new_placement(student, company, placement_date=date(2024, 1, 1))
        )
        newer = await service.create_placement(
            officer, new_placement(student, company, placement_date=date(2024, 9, 1))
        )

        placements = await service.list_placements(officer, student_id=student.id)
        assert [p.id for p in placements] == [newer.id, older.id]

        with pytest.raises(AuthorizationError):
            await service.delete_placement(officer, older.id)

        await service.delete_placement(admin, older.id)
        assert [p.id for p in await service.list_placements(officer)] == [newer.id]
