# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for StudentService.

Covers enrollment numbering, batch seat accounting on create, move and
delete, and the status history.
"""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from src.domains.exceptions import (
    AuthorizationError,
    CapacityExceededError,
    ConcurrentModificationError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
)
from src.domains.student import service as student_module
from src.domains.student.service import StudentService
from src.infrastructure.database.models import Batch, Student
from src.infrastructure.database.transaction import atomic
from src.models.common import Role, StudentStatus
from src.models.student import StudentCreateRequest, StudentUpdateRequest

TODAY = date(2024, 5, 20)


@pytest.fixture
def service(db_session, enrollment_settings):
    return StudentService(db_session, enrollment_settings)


@pytest.fixture(autouse=True)
def fixed_today(monkeypatch):
    """Pin the service's calendar to a known date."""
    monkeypatch.setattr(student_module, "today", lambda: TODAY)
    return TODAY


def new_student(**fields) -> StudentCreateRequest:
    defaults = {
        "first_name": "Asha",
        "last_name": "Rao",
        "email": "asha.rao@example.com",
        "phone": "9988776655",
    }
    defaults.update(fields)
    return StudentCreateRequest(**defaults)


async def enrollment_of(session, batch_id: str) -> int:
    batch = await session.get(Batch, batch_id, populate_existing=True)
    return batch.current_enrollment


async def student_count(session) -> int:
    return (await session.execute(select(func.count()).select_from(Student))).scalar()


class TestEnrollmentNumber:
    """Tests for enrollment number generation."""

    @pytest.mark.asyncio
    async def test_first_number_of_year(self, service):
        assert await service.generate_enrollment_number() == "ENR20240001"

    @pytest.mark.asyncio
    async def test_continues_after_highest_of_year(self, service, seed):
        for number in ("ENR20240001", "ENR20240003", "ENR20240002", "ENR20230099"):
            await seed.student(enrollment_number=number)

        assert await service.generate_enrollment_number() == "ENR20240004"

    @pytest.mark.asyncio
    async def test_numbers_are_sequential_across_creates(self, service, counsellor):
        first = await service.create_student(counsellor, new_student())
        second = await service.create_student(
            counsellor, new_student(email="b@example.com", phone="9988776656")
        )

        assert first.enrollment_number == "ENR20240001"
        assert second.enrollment_number == "ENR20240002"

    @pytest.mark.asyncio
    async def test_number_taken_before_insert_is_reissued(
        self, service, counsellor, db_session, monkeypatch
    ):
        """Losing the number to a concurrent enrollment moves on to the next one."""
        generate = service.generate_enrollment_number
        issued = []

        async def generate_and_lose_race():
            number = await generate()
            if not issued:
                db_session.add(
                    Student(
                        enrollment_number=number,
                        first_name="Other",
                        last_name="Enrollment",
                        phone="9111111111",
                        enrollment_date=TODAY,
                    )
                )
                await db_session.flush()
            issued.append(number)
            return number

        monkeypatch.setattr(service, "generate_enrollment_number", generate_and_lose_race)

        student = await service.create_student(counsellor, new_student())

        assert issued == ["ENR20240001", "ENR20240002"]
        assert student.enrollment_number == "ENR20240002"
        assert await student_count(db_session) == 2

    @pytest.mark.asyncio
    async def test_gives_up_when_numbers_keep_colliding(
        self, service, seed, counsellor, db_session, monkeypatch
    ):
        batch = await seed.batch(capacity=10, current_enrollment=3)
        await seed.student(enrollment_number="ENR20240001")
        batch_id = batch.id

        async def always_taken():
            return "ENR20240001"

        monkeypatch.setattr(service, "generate_enrollment_number", always_taken)

        with pytest.raises(ConcurrentModificationError):
            await service.create_student(counsellor, new_student(batch_id=batch_id))

        assert await student_count(db_session) == 1
        assert await enrollment_of(db_session, batch_id) == 3


class TestCreateStudent:
    """Tests for create_student."""

    @pytest.mark.asyncio
    async def test_create_student_defaults(self, service, counsellor):
        student = await service.create_student(
            counsellor, new_student(email="  Asha.Rao@Example.COM ")
        )

        assert student.status == StudentStatus.ACTIVE
        assert student.email == "asha.rao@example.com"
        assert student.enrollment_date == TODAY
        assert student.batch_id is None
        assert [(h.status, h.notes) for h in student.status_history] == [
            (StudentStatus.ACTIVE, "Student enrolled")
        ]

    @pytest.mark.asyncio
    async def test_create_student_in_batch_takes_seat(self, service, seed, counsellor, db_session):
        batch = await seed.batch(capacity=30, current_enrollment=10)

        student = await service.create_student(counsellor, new_student(batch_id=batch.id))

        assert student.batch_id == batch.id
        assert await enrollment_of(db_session, batch.id) == 11

    @pytest.mark.asyncio
    async def test_create_student_in_full_batch(self, service, seed, counsellor, db_session):
        batch = await seed.batch(capacity=5, current_enrollment=5)
        batch_id = batch.id

        with pytest.raises(CapacityExceededError):
            await service.create_student(counsellor, new_student(batch_id=batch_id))

        assert await enrollment_of(db_session, batch_id) == 5
        assert await student_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_duplicate_phone(self, service, seed, counsellor, db_session):
        await seed.student(phone="9988776655")

        with pytest.raises(DuplicateResourceError) as exc_info:
            await service.create_student(counsellor, new_student())

        assert str(exc_info.value).startswith("Student already exists with phone: 9988776655")
        assert await student_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_duplicate_email_ignores_case(self, service, seed, counsellor):
        await seed.student(email="asha.rao@example.com")

        with pytest.raises(DuplicateResourceError, match="email"):
            await service.create_student(
                counsellor, new_student(email="ASHA.RAO@example.com", phone="9000000000")
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields,message",
        [
            ({"first_name": " "}, "first_name is required"),
            ({"last_name": ""}, "last_name is required"),
            ({"phone": "12345"}, "Phone number should be valid"),
            ({"phone": "98765-43210"}, "Phone number should be valid"),
        ],
    )
    async def test_invalid_fields(self, service, counsellor, fields, message):
        with pytest.raises(ValidationError, match=message):
            await service.create_student(counsellor, new_student(**fields))

    @pytest.mark.asyncio
    async def test_unknown_batch(self, service, counsellor, db_session):
        with pytest.raises(ResourceNotFoundError, match="Batch not found"):
            await service.create_student(counsellor, new_student(batch_id=uuid4()))

        assert await student_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_faculty_may_view_but_not_create(self, service, seed, principals):
        student = await seed.student()

        viewed = await service.get_student(principals[Role.FACULTY], student.id)
        assert viewed.id == student.id

        with pytest.raises(AuthorizationError):
            await service.create_student(principals[Role.FACULTY], new_student())


class TestBatchAssignment:
    """Tests for moving students between batches."""

    @pytest.mark.asyncio
    async def test_move_to_full_batch_changes_nothing(self, service, seed, counsellor, db_session):
        source = await seed.batch(capacity=30, current_enrollment=20)
        target = await seed.batch(capacity=30, current_enrollment=30)
        student = await seed.student(batch=source)
        source_id, target_id, student_id = source.id, target.id, student.id

        with pytest.raises(CapacityExceededError):
            await service.assign_to_batch(counsellor, student_id, target_id)

        assert await enrollment_of(db_session, source_id) == 20
        assert await enrollment_of(db_session, target_id) == 30
        reloaded = await service.get_student(counsellor, student_id)
        assert reloaded.batch_id == source_id

    @pytest.mark.asyncio
    async def test_move_transfers_seat(self, service, seed, counsellor, db_session):
        source = await seed.batch(capacity=30, current_enrollment=20)
        target = await seed.batch(capacity=30, current_enrollment=29)
        student = await seed.student(batch=source)

        moved = await service.assign_to_batch(counsellor, student.id, target.id)

        assert moved.batch_id == target.id
        assert await enrollment_of(db_session, source.id) == 19
        assert await enrollment_of(db_session, target.id) == 30

    @pytest.mark.asyncio
    async def test_assign_to_same_batch_is_noop(self, service, seed, counsellor, db_session):
        batch = await seed.batch(capacity=10, current_enrollment=10)
        student = await seed.student(batch=batch)

        await service.assign_to_batch(counsellor, student.id, batch.id)

        assert await enrollment_of(db_session, batch.id) == 10

    @pytest.mark.asyncio
    async def test_remove_from_batch_releases_seat(self, service, seed, counsellor, db_session):
        batch = await seed.batch(capacity=10, current_enrollment=4)
        student = await seed.student(batch=batch)

        removed = await service.remove_from_batch(counsellor, student.id)

        assert removed.batch_id is None
        assert await enrollment_of(db_session, batch.id) == 3

    @pytest.mark.asyncio
    async def test_update_with_null_batch_releases_seat(
        self, service, seed, counsellor, db_session
    ):
        batch = await seed.batch(capacity=10, current_enrollment=4)
        student = await seed.student(batch=batch)

        updated = await service.update_student(
            counsellor, student.id, StudentUpdateRequest(batch_id=None)
        )

        assert updated.batch_id is None
        assert await enrollment_of(db_session, batch.id) == 3

    @pytest.mark.asyncio
    async def test_update_without_batch_keeps_seat(self, service, seed, counsellor, db_session):
        batch = await seed.batch(capacity=10, current_enrollment=4)
        student = await seed.student(batch=batch)

        updated = await service.update_student(
            counsellor, student.id, StudentUpdateRequest(first_name="Renamed")
        )

        assert updated.first_name == "Renamed"
        assert updated.batch_id == batch.id

    @pytest.mark.asyncio
    async def test_move_from_outdated_copy_is_rejected(
        self, seed, session_factory, enrollment_settings, counsellor
    ):
        """A move based on an outdated read cannot release the old seat twice."""
        batch_a = await seed.batch(capacity=30, current_enrollment=2)
        batch_b = await seed.batch(capacity=30, current_enrollment=0)
        batch_c = await seed.batch(capacity=30, current_enrollment=0)
        student = await seed.student(batch=batch_a)
        await seed.student(batch=batch_a)
        ids = {"A": batch_a.id, "B": batch_b.id, "C": batch_c.id}
        student_id = student.id

        async with session_factory() as first, session_factory() as second:
            stale = await StudentService(first, enrollment_settings).get_student(
                counsellor, student_id
            )
            await first.commit()

            await StudentService(second, enrollment_settings).assign_to_batch(
                counsellor, student_id, ids["B"]
            )
            await second.commit()

            # first still believes the student sits in A
            assert stale.batch_id == ids["A"]
            with pytest.raises(ConcurrentModificationError):
                async with atomic(first):
                    await StudentService(first, enrollment_settings)._move(stale, ids["C"])

            counters = {name: await enrollment_of(second, bid) for name, bid in ids.items()}
            assigned = {
                name: (
                    await second.execute(
                        select(func.count()).select_from(Student).where(Student.batch_id == bid)
                    )
                ).scalar()
                for name, bid in ids.items()
            }
            await second.commit()

        assert counters == {"A": 1, "B": 1, "C": 0}
        assert assigned == counters
        assert await enrollment_of(db_session, batch.id) == 4


class TestUpdateStudent:
    """Tests for update_student field handling."""

    @pytest.mark.asyncio
    async def test_phone_taken_by_other_student(self, service, seed, counsellor):
        await seed.student(phone="9111111111")
        student = await seed.student(phone="9222222222")

        with pytest.raises(DuplicateResourceError):
            await service.update_student(
                counsellor, student.id, StudentUpdateRequest(phone="9111111111")
            )

    @pytest.mark.asyncio
    async def test_keeping_own_phone_is_not_duplicate(self, service, seed, counsellor):
        student = await seed.student(phone="9222222222")

        updated = await service.update_student(
            counsellor, student.id, StudentUpdateRequest(phone="9222222222", address="Pune")
        )

        assert updated.address == "Pune"

    @pytest.mark.asyncio
    async def test_status_change_through_update_is_recorded(self, service, seed, counsellor):
        student = await seed.student()

        updated = await service.update_student(
            counsellor, student.id, StudentUpdateRequest(status=StudentStatus.SUSPENDED)
        )

        assert updated.status == StudentStatus.SUSPENDED
        assert updated.status_history[-1].notes == "Status changed from ACTIVE to SUSPENDED"


class TestStatusHistory:
    """Tests for status changes and graduation."""

    @pytest.mark.asyncio
    async def test_each_change_appends_one_entry(self, service, seed, counsellor):
        student = await seed.student()

        await service.update_status(counsellor, student.id, StudentStatus.SUSPENDED)
        updated = await service.update_status(counsellor, student.id, StudentStatus.ACTIVE)

        assert [h.status for h in updated.status_history] == [
            StudentStatus.ACTIVE,
            StudentStatus.SUSPENDED,
            StudentStatus.ACTIVE,
        ]
        assert updated.status_history[1].notes == "Status changed from ACTIVE to SUSPENDED"

    @pytest.mark.asyncio
    async def test_same_status_adds_nothing(self, service, seed, counsellor):
        student = await seed.student()

        updated = await service.update_status(counsellor, student.id, StudentStatus.ACTIVE)

        assert len(updated.status_history) == 1

    @pytest.mark.asyncio
    async def test_graduate(self, service, seed, counsellor):
        student = await seed.student()

        graduated = await service.graduate(counsellor, student.id, "A+")

        assert graduated.status == StudentStatus.GRADUATED
        assert graduated.graduation_date == TODAY
        assert graduated.final_grade == "A+"
        assert graduated.status_history[-1].notes == "Student graduated with grade: A+"

    @pytest.mark.asyncio
    async def test_graduate_twice_rejected(self, service, seed, counsellor):
        student = await seed.student()
        await service.graduate(counsellor, student.id, "B")

        with pytest.raises(ValidationError, match="already graduated"):
            await service.graduate(counsellor, student.id, "A")

    @pytest.mark.asyncio
    async def test_graduate_requires_grade(self, service, seed, counsellor):
        student = await seed.student()

        with pytest.raises(ValidationError, match="final_grade is required"):
            await service.graduate(counsellor, student.id, "  ")


class TestDeleteStudent:
    """Tests for delete_student."""

    @pytest.mark.asyncio
    async def test_delete_releases_seat(self, service, seed, admin, db_session):
        batch = await seed.batch(capacity=10, current_enrollment=10)
        student = await seed.student(batch=batch)
        batch_id, student_id = batch.id, student.id

        await service.delete_student(admin, student_id)

        assert await enrollment_of(db_session, batch_id) == 9
        with pytest.raises(ResourceNotFoundError):
            await service.get_student(admin, student_id)

    @pytest.mark.asyncio
    async def test_delete_requires_admin(self, service, seed, counsellor):
        student = await seed.student()

        with pytest.raises(AuthorizationError):
            await service.delete_student(counsellor, student.id)


class TestListStudents:
    """Tests for list_students."""

    @pytest.mark.asyncio
    async def test_filter_by_batch_and_status(self, service, seed, admin):
        batch = await seed.batch(current_enrollment=2)
        await seed.student(batch=batch)
        await seed.student(batch=batch, status=StudentStatus.DROPPED_OUT)
        await seed.student()

        in_batch, total = await service.list_students(admin, batch_id=batch.id)
        assert total == 2
        assert {s.batch_id for s in in_batch} == {batch.id}

        dropped, total = await service.list_students(admin, status=StudentStatus.DROPPED_OUT)
        assert total == 1
        assert dropped[0].status == StudentStatus.DROPPED_OUT
