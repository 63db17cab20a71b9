# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for enrollment, assignment and status tracking.

This module provides the StudentService class for:
- Student enrollment with generated enrollment numbers
- Batch assignment and moves between batches
- Status changes with an append-only history
- Graduation

Batch moves increment the destination batch first and release the old
seat second, both inside one transaction, so a full destination leaves
both batches untouched. The student row itself only changes batch if it
still references the batch it was read with.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import Integer, and_, cast, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from src.core.config import EnrollmentSettings, get_settings
from src.domains.auth import Operation, Principal, ResourceType, require_permission
from src.domains.batch.service import BatchService
from src.domains.exceptions import (
    ConcurrentModificationError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
)
from src.domains.validation import (
    ensure_unique,
    normalize_email,
    require_non_blank,
    require_phone,
)
from src.infrastructure.database.models import Lead, Student, StudentStatusHistory
from src.infrastructure.database.transaction import atomic
from src.models.common import StudentStatus
from src.models.student import StudentCreateRequest, StudentUpdateRequest
from src.utils.datetime import today

logger = logging.getLogger(__name__)

UNIQUE_STUDENT_FIELDS = ("enrollment_number", "lead_id", "email", "phone")
ENROLLMENT_NUMBER_ATTEMPTS = 5


class StudentService:
    """Service for managing students.

    Attributes:
        db: Async database session.
        settings: Enrollment numbering settings.
        batches: Batch service sharing the same session.
    """

    def __init__(self, db: AsyncSession, settings: EnrollmentSettings | None = None) -> None:
        """Initialize student service.

        Args:
            db: Async database session.
            settings: Enrollment settings. Defaults to the application settings.
        """
        self.db = db
        self.settings = settings or get_settings().enrollment
        self.batches = BatchService(db, self.settings)

    async def create_student(
        self,
        principal: Principal | None,
        request: StudentCreateRequest,
    ) -> Student:
        """Enroll a new student.

        Args:
            principal: Calling employee.
            request: Student creation data.

        Returns:
            Created student with its first history entry.

        Raises:
            AuthorizationError: If the caller may not create students.
            ValidationError: If a required field is missing or malformed.
            DuplicateResourceError: If email or phone is already used.
            ResourceNotFoundError: If the batch or lead does not exist.
            CapacityExceededError: If the batch is full.
        """
        principal = require_permission(principal, Operation.CREATE, ResourceType.STUDENT)

        async with atomic(self.db):
            student = await self.register_student(request)

        logger.info(
            "Enrolled student: %s (%s) by %s",
            student.enrollment_number,
            student.id,
            principal.employee_id,
        )

        return student

    async def register_student(self, request: StudentCreateRequest) -> Student:
        """Validate and stage a new student in the current transaction.

        Shared by direct enrollment and lead conversion. It performs no
        permission check and does not commit.

        Raises:
            ValidationError: If a required field is missing or malformed.
            DuplicateResourceError: If email, phone or lead is already used.
            ResourceNotFoundError: If the batch or lead does not exist.
            CapacityExceededError: If the batch is full.
            ConcurrentModificationError: If every generated enrollment number
                was taken by a concurrent enrollment.
        """
        first_name = require_non_blank(request.first_name, "first_name", max_length=50)
        last_name = require_non_blank(request.last_name, "last_name", max_length=50)
        phone = require_phone(request.phone)
        email = normalize_email(request.email)

        await ensure_unique(self.db, Student, "Student", {"email": email, "phone": phone})

        lead_id = None
        if request.lead_id is not None:
            lead_id = await self._get_lead_id(request.lead_id)
            await ensure_unique(self.db, Student, "Student", {"lead_id": lead_id})

        batch_id = None
        if request.batch_id is not None:
            await self.batches.adjust_enrollment(request.batch_id, 1)
            batch_id = str(request.batch_id)

        for attempt in range(1, ENROLLMENT_NUMBER_ATTEMPTS + 1):
            student = Student(
                enrollment_number=await self.generate_enrollment_number(),
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone=phone,
                date_of_birth=request.date_of_birth,
                address=request.address,
                status=StudentStatus.ACTIVE,
                batch_id=batch_id,
                lead_id=lead_id,
                enrollment_date=request.enrollment_date or today(),
            )
            student.status_history.append(
                StudentStatusHistory(status=StudentStatus.ACTIVE, notes="Student enrolled")
            )

            try:
                async with self.db.begin_nested():
                    self.db.add(student)
                    await self.db.flush()
            except IntegrityError as e:
                field = self._violated_field(e)
                if field != "enrollment_number":
                    value = getattr(student, field, None)
                    raise DuplicateResourceError("Student", field, value) from e
                logger.warning(
                    "Enrollment number %s taken concurrently (attempt %d)",
                    student.enrollment_number,
                    attempt,
                )
                continue

            return student

        raise ConcurrentModificationError("Student", student.enrollment_number)

    async def generate_enrollment_number(self) -> str:
        """Issue the next enrollment number for the current year.

        The number is the configured prefix, the year, and a zero-padded
        sequence one greater than the highest already issued this year.

        Returns:
            e.g. ``ENR20240004`` when ENR20240001..ENR20240003 exist.
        """
        prefix = f"{self.settings.number_prefix}{today().year}"
        sequence = cast(func.substr(Student.enrollment_number, len(prefix) + 1), Integer)

        result = await self.db.execute(
            select(func.max(sequence)).where(Student.enrollment_number.like(f"{prefix}%"))
        )
        last = result.scalar() or 0

        return f"{prefix}{last + 1:0{self.settings.sequence_width}d}"

    async def get_student(self, principal: Principal | None, student_id: UUID | str) -> Student:
        """Get a student by ID.

        Raises:
            AuthorizationError: If the caller may not view students.
            ResourceNotFoundError: If student not found.
        """
        require_permission(principal, Operation.VIEW, ResourceType.STUDENT)
        return await self._get_by_id(student_id)

    async def list_students(
        self,
        principal: Principal | None,
        status: StudentStatus | None = None,
        batch_id: UUID | str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Student], int]:
        """List students with filtering.

        Returns:
            Tuple of (students ordered by enrollment number, total count).
        """
        require_permission(principal, Operation.VIEW, ResourceType.STUDENT)

        conditions = []
        if status is not None:
            conditions.append(Student.status == status)
        if batch_id is not None:
            conditions.append(Student.batch_id == str(batch_id))

        query = select(Student)
        count_query = select(func.count()).select_from(Student)
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(Student.enrollment_number).limit(limit).offset(offset)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total

    async def update_student(
        self,
        principal: Principal | None,
        student_id: UUID | str,
        request: StudentUpdateRequest,
    ) -> Student:
        """Update a student.

        Only fields that were set on the request are applied. Setting
        ``batch_id`` moves the student between batches atomically; setting
        it to None releases the seat.

        Raises:
            AuthorizationError: If the caller may not update students.
            ResourceNotFoundError: If student or batch not found.
            ValidationError: If a field is malformed.
            DuplicateResourceError: If email or phone is used by another student.
            CapacityExceededError: If the new batch is full. Neither batch changes.
            ConcurrentModificationError: If another writer moved the student
                since it was read.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.STUDENT)

        student = await self._get_by_id(student_id)
        student_id = student.id
        changes = request.model_dump(exclude_unset=True)

        for field in ("first_name", "last_name"):
            if field in changes:
                changes[field] = require_non_blank(changes[field], field, max_length=50)
        if "phone" in changes:
            changes["phone"] = require_phone(changes["phone"])
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])

        await ensure_unique(
            self.db,
            Student,
            "Student",
            {"email": changes.get("email"), "phone": changes.get("phone")},
            exclude_id=student_id,
        )

        async with atomic(self.db):
            if "batch_id" in changes:
                await self._move(student, changes["batch_id"])

            for field in ("first_name", "last_name", "email", "phone", "date_of_birth", "address"):
                if field in changes:
                    setattr(student, field, changes[field])

            new_status = changes.get("status")
            if new_status is not None and new_status != student.status:
                self._record_status(student, new_status)

            await self._flush(student)

        logger.info("Updated student: %s by %s", student_id, principal.employee_id)

        return await self._get_by_id(student_id)

    async def assign_to_batch(
        self,
        principal: Principal | None,
        student_id: UUID | str,
        batch_id: UUID | str,
    ) -> Student:
        """Place a student in a batch, releasing any previous seat.

        Assigning a student to the batch they are already in changes nothing.

        Raises:
            AuthorizationError: If the caller may not update students.
            ResourceNotFoundError: If student or batch not found.
            CapacityExceededError: If the batch is full. Neither batch changes.
            ConcurrentModificationError: If another writer moved the student
                since it was read.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.STUDENT)

        student = await self._get_by_id(student_id)
        student_id = student.id

        async with atomic(self.db):
            await self._move(student, batch_id)

        logger.info(
            "Assigned student %s to batch %s by %s",
            student_id,
            batch_id,
            principal.employee_id,
        )

        return await self._get_by_id(student_id)

    async def remove_from_batch(
        self,
        principal: Principal | None,
        student_id: UUID | str,
    ) -> Student:
        """Take a student out of their batch and release the seat.

        Raises:
            AuthorizationError: If the caller may not update students.
            ResourceNotFoundError: If student not found.
            ConcurrentModificationError: If another writer moved the student
                since it was read.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.STUDENT)

        student = await self._get_by_id(student_id)
        student_id = student.id

        async with atomic(self.db):
            await self._move(student, None)

        logger.info("Removed student %s from batch by %s", student_id, principal.employee_id)

        return await self._get_by_id(student_id)

    async def update_status(
        self,
        principal: Principal | None,
        student_id: UUID | str,
        new_status: StudentStatus,
    ) -> Student:
        """Change a student's status and record it in the history.

        Setting the status the student already has is a no-op.

        Raises:
            AuthorizationError: If the caller may not change student status.
            ResourceNotFoundError: If student not found.
        """
        principal = require_permission(principal, Operation.UPDATE_STATUS, ResourceType.STUDENT)

        student = await self._get_by_id(student_id)
        student_id = student.id
        if student.status == new_status:
            return student

        async with atomic(self.db):
            self._record_status(student, new_status)

        logger.info(
            "Student %s status changed to %s by %s",
            student_id,
            new_status.value,
            principal.employee_id,
        )

        return await self._get_by_id(student_id)

    async def graduate(
        self,
        principal: Principal | None,
        student_id: UUID | str,
        final_grade: str,
    ) -> Student:
        """Graduate a student with a final grade.

        Raises:
            AuthorizationError: If the caller may not update students.
            ResourceNotFoundError: If student not found.
            ValidationError: If the grade is blank or the student has
                already graduated.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.STUDENT)

        final_grade = require_non_blank(final_grade, "final_grade", max_length=10)
        student = await self._get_by_id(student_id)
        student_id = student.id
        if student.status == StudentStatus.GRADUATED:
            raise ValidationError(
                "Student has already graduated",
                details={"student_id": student_id},
            )

        async with atomic(self.db):
            student.graduation_date = today()
            student.final_grade = final_grade
            self._record_status(
                student,
                StudentStatus.GRADUATED,
                notes=f"Student graduated with grade: {final_grade}",
            )

        logger.info("Graduated student %s by %s", student_id, principal.employee_id)

        return await self._get_by_id(student_id)

    async def delete_student(self, principal: Principal | None, student_id: UUID | str) -> None:
        """Delete a student, releasing their batch seat first.

        Raises:
            AuthorizationError: If the caller may not delete students.
            ResourceNotFoundError: If student not found.
            ConcurrentModificationError: If the student changed batch after
                it was read.
        """
        principal = require_permission(principal, Operation.DELETE, ResourceType.STUDENT)

        student = await self._get_by_id(student_id)
        student_id = student.id

        async with atomic(self.db):
            await self._move(student, None)
            await self.db.delete(student)

        logger.info("Deleted student: %s by %s", student_id, principal.employee_id)

    async def _move(self, student: Student, batch_id: UUID | str | None) -> None:
        """Move a student to another batch (or out of any batch).

        Must run inside a transaction. The destination is incremented
        first, so a full destination fails before anything else changed.
        The student row is then switched only while it still references
        the batch it was loaded with, and the source seat is released last.

        Raises:
            ConcurrentModificationError: If another writer moved or deleted
                the student since it was loaded.
        """
        new_batch_id = str(batch_id) if batch_id is not None else None
        old_batch_id = student.batch_id
        if new_batch_id == old_batch_id:
            return

        if new_batch_id is not None:
            await self.batches.adjust_enrollment(new_batch_id, 1)

        result = await self.db.execute(
            update(Student)
            .where(
                Student.id == student.id,
                Student.batch_id.is_not_distinct_from(old_batch_id),
            )
            .values(batch_id=new_batch_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConcurrentModificationError("Student", student.id)

        if old_batch_id is not None:
            await self.batches.adjust_enrollment(old_batch_id, -1)

        set_committed_value(student, "batch_id", new_batch_id)

    @staticmethod
    def _record_status(
        student: Student,
        new_status: StudentStatus,
        notes: str | None = None,
    ) -> None:
        """Set the status and append exactly one history entry."""
        previous = student.status
        student.status = new_status
        student.status_history.append(
            StudentStatusHistory(
                status=new_status,
                notes=notes or f"Status changed from {previous.value} to {new_status.value}",
            )
        )

    async def _flush(self, student: Student) -> None:
        """Flush pending changes, reporting unique violations as duplicates."""
        try:
            await self.db.flush()
        except IntegrityError as e:
            field = self._violated_field(e)
            raise DuplicateResourceError("Student", field, getattr(student, field, None)) from e

    @staticmethod
    def _violated_field(error: IntegrityError) -> str:
        """Name the unique student column an IntegrityError reports."""
        message = str(error.orig)
        return next((f for f in UNIQUE_STUDENT_FIELDS if f in message), "unique field")

    async def _get_lead_id(self, lead_id: UUID | str) -> str:
        result = await self.db.execute(select(Lead.id).where(Lead.id == str(lead_id)))
        found = result.scalar_one_or_none()
        if found is None:
            raise ResourceNotFoundError("Lead", lead_id)
        return found

    async def _get_by_id(self, student_id: UUID | str) -> Student:
        """Load a student, always overwriting any stale in-session copy.

        Raises:
            ResourceNotFoundError: If student not found.
        """
        result = await self.db.execute(
            select(Student)
            .where(Student.id == str(student_id))
            .execution_options(populate_existing=True)
        )
        student = result.scalar_one_or_none()

        if not student:
            raise ResourceNotFoundError("Student", student_id)

        return student
