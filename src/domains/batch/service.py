# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch service for managing capacity-limited cohorts.

This module provides the BatchService class for:
- Batch CRUD operations with derived end dates
- Capacity changes guarded against the current enrollment
- The enrollment counter primitive used by student assignment

``current_enrollment`` is never read, modified and written back from
Python. Every change is a single conditional UPDATE whose WHERE clause
re-checks ``0 <= current_enrollment <= capacity``; the database serializes
competing writers on the row and a losing writer sees zero affected rows.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import EnrollmentSettings, get_settings
from src.domains.auth import Operation, Principal, ResourceType, require_permission
from src.domains.exceptions import (
    CapacityExceededError,
    ResourceNotFoundError,
    ValidationError,
)
from src.domains.validation import require_non_blank, require_range
from src.infrastructure.database.models import Batch, Course, Employee
from src.infrastructure.database.transaction import atomic
from src.models.batch import BatchCreateRequest, BatchUpdateRequest
from src.models.common import BatchStatus
from src.utils.datetime import add_months

logger = logging.getLogger(__name__)


class BatchService:
    """Service for managing batches and their enrollment counters.

    Attributes:
        db: Async database session.
        settings: Capacity bounds.
    """

    def __init__(self, db: AsyncSession, settings: EnrollmentSettings | None = None) -> None:
        """Initialize batch service.

        Args:
            db: Async database session.
            settings: Enrollment settings. Defaults to the application settings.
        """
        self.db = db
        self.settings = settings or get_settings().enrollment

    async def create_batch(
        self,
        principal: Principal | None,
        request: BatchCreateRequest,
    ) -> Batch:
        """Create a new batch with zero enrollment.

        Args:
            principal: Calling employee.
            request: Batch creation data.

        Returns:
            Created batch.

        Raises:
            AuthorizationError: If the caller may not create batches.
            ValidationError: If name or capacity is invalid.
            ResourceNotFoundError: If the course or instructor does not exist.
        """
        principal = require_permission(principal, Operation.CREATE, ResourceType.BATCH)

        name = require_non_blank(request.name, "name", max_length=100)
        self._check_capacity_range(request.capacity)
        course = await self._get_course(request.course_id)
        if request.instructor_id is not None:
            await self._get_instructor(request.instructor_id)

        batch = Batch(
            name=name,
            course_id=course.id,
            start_date=request.start_date,
            end_date=add_months(request.start_date, course.duration_months),
            capacity=request.capacity,
            current_enrollment=0,
            status=request.status or BatchStatus.PLANNED,
            instructor_id=str(request.instructor_id) if request.instructor_id else None,
        )

        self.db.add(batch)
        await self.db.commit()
        await self.db.refresh(batch)

        logger.info("Created batch: %s (%s) by %s", batch.name, batch.id, principal.employee_id)

        return batch

    async def get_batch(self, principal: Principal | None, batch_id: UUID | str) -> Batch:
        """Get a batch by ID.

        Raises:
            AuthorizationError: If the caller may not view batches.
            ResourceNotFoundError: If batch not found.
        """
        require_permission(principal, Operation.VIEW, ResourceType.BATCH)
        return await self._get_by_id(batch_id)

    async def list_batches(
        self,
        principal: Principal | None,
        status: BatchStatus | None = None,
        course_id: UUID | str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Batch], int]:
        """List batches with filtering.

        Args:
            principal: Calling employee.
            status: Filter by status.
            course_id: Filter by course.
            limit: Maximum results.
            offset: Pagination offset.

        Returns:
            Tuple of (batches ordered by start date, total count).
        """
        require_permission(principal, Operation.VIEW, ResourceType.BATCH)

        conditions = []
        if status is not None:
            conditions.append(Batch.status == status)
        if course_id is not None:
            conditions.append(Batch.course_id == str(course_id))

        query = select(Batch)
        count_query = select(func.count()).select_from(Batch)
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(Batch.start_date, Batch.name).limit(limit).offset(offset)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total

    async def update_batch(
        self,
        principal: Principal | None,
        batch_id: UUID | str,
        request: BatchUpdateRequest,
    ) -> Batch:
        """Update a batch.

        Only fields that were set on the request are applied. A capacity
        change goes through the same guard as update_batch_capacity, and the
        end date is recomputed when the start date or course changes.

        Raises:
            AuthorizationError: If the caller may not update batches.
            ResourceNotFoundError: If batch, course or instructor not found.
            ValidationError: If name or capacity is invalid.
            CapacityExceededError: If capacity would drop below enrollment.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.BATCH)

        batch = await self._get_by_id(batch_id)
        batch_id = batch.id
        changes = request.model_dump(exclude_unset=True)

        if "name" in changes:
            changes["name"] = require_non_blank(changes["name"], "name", max_length=100)
        if changes.get("capacity") is not None:
            self._check_capacity_range(changes["capacity"])

        course = None
        if changes.get("course_id") is not None:
            course = await self._get_course(changes["course_id"])
        elif changes.get("start_date") is not None:
            course = await self._get_course(batch.course_id)

        if changes.get("instructor_id") is not None:
            await self._get_instructor(changes["instructor_id"])

        async with atomic(self.db):
            if changes.get("capacity") is not None:
                await self._apply_capacity(batch_id, changes["capacity"])

            if changes.get("name") is not None:
                batch.name = changes["name"]
            if changes.get("start_date") is not None:
                batch.start_date = changes["start_date"]
            if course is not None:
                batch.course_id = course.id
                batch.end_date = add_months(batch.start_date, course.duration_months)
            if changes.get("status") is not None:
                batch.status = changes["status"]
            if "instructor_id" in changes:
                instructor_id = changes["instructor_id"]
                batch.instructor_id = str(instructor_id) if instructor_id else None

        logger.info("Updated batch: %s by %s", batch_id, principal.employee_id)

        return await self._get_by_id(batch_id)

    async def update_batch_capacity(
        self,
        principal: Principal | None,
        batch_id: UUID | str,
        new_capacity: int,
    ) -> Batch:
        """Change a batch's capacity.

        Raises:
            AuthorizationError: If the caller may not change capacity.
            ResourceNotFoundError: If batch not found.
            ValidationError: If the capacity is outside the allowed range.
            CapacityExceededError: If new_capacity is below the current
                enrollment. The capacity is left unchanged.
        """
        principal = require_permission(principal, Operation.UPDATE_CAPACITY, ResourceType.BATCH)

        self._check_capacity_range(new_capacity)
        batch_id = (await self._get_by_id(batch_id)).id

        async with atomic(self.db):
            await self._apply_capacity(batch_id, new_capacity)

        logger.info(
            "Updated capacity of batch %s to %d by %s",
            batch_id,
            new_capacity,
            principal.employee_id,
        )

        return await self._get_by_id(batch_id)

    async def update_batch_status(
        self,
        principal: Principal | None,
        batch_id: UUID | str,
        status: BatchStatus,
    ) -> Batch:
        """Set a batch's lifecycle status.

        Raises:
            AuthorizationError: If the caller may not change batch status.
            ResourceNotFoundError: If batch not found.
        """
        principal = require_permission(principal, Operation.UPDATE_STATUS, ResourceType.BATCH)

        batch = await self._get_by_id(batch_id)
        previous = batch.status
        batch.status = status

        await self.db.commit()
        await self.db.refresh(batch)

        logger.info(
            "Batch %s status changed from %s to %s by %s",
            batch.id,
            previous.value,
            status.value,
            principal.employee_id,
        )

        return batch

    async def delete_batch(self, principal: Principal | None, batch_id: UUID | str) -> None:
        """Delete an empty batch.

        Raises:
            AuthorizationError: If the caller may not delete batches.
            ResourceNotFoundError: If batch not found.
            ValidationError: If any student is enrolled in the batch.
        """
        principal = require_permission(principal, Operation.DELETE, ResourceType.BATCH)

        batch = await self._get_by_id(batch_id)
        if batch.current_enrollment > 0:
            raise ValidationError(
                "Cannot delete batch with enrolled students",
                details={"batch_id": batch.id, "current_enrollment": batch.current_enrollment},
            )

        async with atomic(self.db):
            # Re-checked in the statement so a concurrent enrollment wins
            result = await self.db.execute(
                delete(Batch)
                .where(Batch.id == batch.id, Batch.current_enrollment == 0)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ValidationError(
                    "Cannot delete batch with enrolled students",
                    details={"batch_id": batch.id},
                )
            self.db.expunge(batch)

        logger.info("Deleted batch: %s by %s", batch_id, principal.employee_id)

    async def has_available_capacity(
        self,
        principal: Principal | None,
        batch_id: UUID | str,
    ) -> bool:
        """Check whether a batch has at least one free seat."""
        return await self.get_available_slots(principal, batch_id) > 0

    async def get_available_slots(
        self,
        principal: Principal | None,
        batch_id: UUID | str,
    ) -> int:
        """Number of free seats in a batch (capacity - current enrollment).

        Raises:
            AuthorizationError: If the caller may not check availability.
            ResourceNotFoundError: If batch not found.
        """
        require_permission(principal, Operation.CHECK_AVAILABILITY, ResourceType.BATCH)
        batch = await self._get_by_id(batch_id)
        return batch.available_slots

    async def adjust_enrollment(self, batch_id: UUID | str, delta: int) -> None:
        """Move a batch's enrollment counter by ``delta`` seats.

        This is the only write path for ``current_enrollment``. It does not
        check permissions and does not commit; callers run it inside their
        own authorized transaction.

        Args:
            batch_id: Batch to adjust.
            delta: Seats to add (positive) or release (negative).

        Raises:
            ResourceNotFoundError: If batch not found.
            CapacityExceededError: If a positive delta would pass capacity.
            ValidationError: If a negative delta would go below zero.
        """
        if delta == 0:
            return

        batch_id = str(batch_id)
        new_value = Batch.current_enrollment + delta
        result = await self.db.execute(
            update(Batch)
            .where(
                Batch.id == batch_id,
                new_value >= 0,
                new_value <= Batch.capacity,
            )
            .values(current_enrollment=new_value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        row = (
            await self.db.execute(
                select(Batch.name, Batch.capacity, Batch.current_enrollment).where(
                    Batch.id == batch_id
                )
            )
        ).one_or_none()
        if row is None:
            raise ResourceNotFoundError("Batch", batch_id)

        name, capacity, current = row
        if delta > 0:
            raise CapacityExceededError(
                f"Cannot enroll student in batch '{name}'. "
                f"Capacity: {capacity}, Current enrollment: {current}",
                batch_id=batch_id,
                capacity=capacity,
                current_enrollment=current,
            )
        raise ValidationError(
            f"Cannot release {-delta} seat(s) from batch '{name}' "
            f"with current enrollment {current}",
            details={"batch_id": batch_id, "current_enrollment": current},
        )

    async def _apply_capacity(self, batch_id: str, new_capacity: int) -> None:
        """Set capacity only if it still covers the current enrollment."""
        result = await self.db.execute(
            update(Batch)
            .where(Batch.id == batch_id, Batch.current_enrollment <= new_capacity)
            .values(capacity=new_capacity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = (
                await self.db.execute(
                    select(Batch.current_enrollment).where(Batch.id == batch_id)
                )
            ).scalar_one()
            raise CapacityExceededError(
                f"New capacity cannot be less than current enrollment: {current}",
                batch_id=batch_id,
                capacity=new_capacity,
                current_enrollment=current,
            )

    def _check_capacity_range(self, capacity: int) -> None:
        require_range(
            capacity,
            "capacity",
            self.settings.min_batch_capacity,
            self.settings.max_batch_capacity,
        )

    async def _get_by_id(self, batch_id: UUID | str) -> Batch:
        """Load a batch, always overwriting any stale in-session copy.

        Raises:
            ResourceNotFoundError: If batch not found.
        """
        query = (
            select(Batch)
            .where(Batch.id == str(batch_id))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        batch = result.scalar_one_or_none()

        if not batch:
            raise ResourceNotFoundError("Batch", batch_id)

        return batch

    async def _get_course(self, course_id: UUID | str) -> Course:
        result = await self.db.execute(select(Course).where(Course.id == str(course_id)))
        course = result.scalar_one_or_none()
        if not course:
            raise ResourceNotFoundError("Course", course_id)
        return course

    async def _get_instructor(self, instructor_id: UUID | str) -> Employee:
        result = await self.db.execute(select(Employee).where(Employee.id == str(instructor_id)))
        instructor = result.scalar_one_or_none()
        if not instructor:
            raise ResourceNotFoundError("Employee", instructor_id)
        return instructor
