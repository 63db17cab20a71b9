# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement service for recording student job placements.

This module provides the PlacementService class for:
- Placement CRUD
- Placement status changes (any status may follow any other)

Activity, probation and tenure are derived on the Placement model itself.
"""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.auth import Operation, Principal, ResourceType, require_permission
from src.domains.exceptions import ResourceNotFoundError, ValidationError
from src.domains.validation import require_non_blank, require_positive, require_range
from src.infrastructure.database.models import Base, Company, Placement, Student
from src.models.common import PlacementStatus
from src.models.placement import PlacementCreateRequest, PlacementUpdateRequest

logger = logging.getLogger(__name__)

MAX_PROBATION_MONTHS = 24


class PlacementService:
    """Service for managing placements.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize placement service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def create_placement(
        self,
        principal: Principal | None,
        request: PlacementCreateRequest,
    ) -> Placement:
        """Record a new placement in status PLACED.

        Raises:
            AuthorizationError: If the caller may not create placements.
            ResourceNotFoundError: If student or company not found.
            ValidationError: If position, salary, probation or dates are invalid.
        """
        principal = require_permission(principal, Operation.CREATE, ResourceType.PLACEMENT)

        await self._ensure_exists(Student, "Student", request.student_id)
        await self._ensure_exists(Company, "Company", request.company_id)

        position = require_non_blank(request.position, "position", max_length=100)
        require_positive(request.salary, "salary")
        if request.probation_months is not None:
            require_range(request.probation_months, "probation_months", 0, MAX_PROBATION_MONTHS)
        self._check_dates(request.joining_date, request.end_date)

        placement = Placement(
            student_id=str(request.student_id),
            company_id=str(request.company_id),
            position=position,
            salary=request.salary,
            placement_date=request.placement_date,
            status=PlacementStatus.PLACED,
            job_type=request.job_type,
            employment_type=request.employment_type,
            work_location=request.work_location,
            joining_date=request.joining_date,
            end_date=request.end_date,
            probation_months=request.probation_months,
            notes=request.notes,
        )

        self.db.add(placement)
        await self.db.commit()
        await self.db.refresh(placement)

        logger.info(
            "Created placement %s: student=%s company=%s by %s",
            placement.id,
            placement.student_id,
            placement.company_id,
            principal.employee_id,
        )

        return placement

    async def get_placement(
        self,
        principal: Principal | None,
        placement_id: UUID | str,
    ) -> Placement:
        """Get a placement by ID.

        Raises:
            AuthorizationError: If the caller may not view placements.
            ResourceNotFoundError: If placement not found.
        """
        require_permission(principal, Operation.VIEW, ResourceType.PLACEMENT)
        return await self._get_by_id(placement_id)

    async def list_placements(
        self,
        principal: Principal | None,
        status: PlacementStatus | None = None,
        student_id: UUID | str | None = None,
        company_id: UUID | str | None = None,
    ) -> list[Placement]:
        """List placements, most recent placement date first."""
        require_permission(principal, Operation.VIEW, ResourceType.PLACEMENT)

        conditions = []
        if status is not None:
            conditions.append(Placement.status == status)
        if student_id is not None:
            conditions.append(Placement.student_id == str(student_id))
        if company_id is not None:
            conditions.append(Placement.company_id == str(company_id))

        query = select(Placement)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(Placement.placement_date.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_placement(
        self,
        principal: Principal | None,
        placement_id: UUID | str,
        request: PlacementUpdateRequest,
    ) -> Placement:
        """Update a placement. Only fields set on the request are applied.

        Raises:
            AuthorizationError: If the caller may not update placements.
            ResourceNotFoundError: If placement not found.
            ValidationError: If position, salary, probation or dates are invalid.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.PLACEMENT)

        placement = await self._get_by_id(placement_id)
        changes = request.model_dump(exclude_unset=True)

        if "position" in changes:
            changes["position"] = require_non_blank(changes["position"], "position", max_length=100)
        if "salary" in changes:
            require_positive(changes["salary"], "salary")
        if changes.get("probation_months") is not None:
            require_range(changes["probation_months"], "probation_months", 0, MAX_PROBATION_MONTHS)
        if changes.get("status") is None:
            changes.pop("status", None)
        if changes.get("placement_date") is None:
            changes.pop("placement_date", None)

        self._check_dates(
            changes.get("joining_date", placement.joining_date),
            changes.get("end_date", placement.end_date),
        )

        for field, value in changes.items():
            setattr(placement, field, value)

        await self.db.commit()
        await self.db.refresh(placement)

        logger.info("Updated placement: %s by %s", placement.id, principal.employee_id)

        return placement

    async def update_placement_status(
        self,
        principal: Principal | None,
        placement_id: UUID | str,
        status: PlacementStatus,
    ) -> Placement:
        """Set a placement's status. Every status may follow every other.

        Raises:
            AuthorizationError: If the caller may not update placements.
            ResourceNotFoundError: If placement not found.
        """
        principal = require_permission(principal, Operation.UPDATE_STATUS, ResourceType.PLACEMENT)

        placement = await self._get_by_id(placement_id)
        previous = placement.status
        placement.status = status

        await self.db.commit()
        await self.db.refresh(placement)

        logger.info(
            "Placement %s status changed from %s to %s by %s",
            placement.id,
            previous.value,
            status.value,
            principal.employee_id,
        )

        return placement

    async def delete_placement(self, principal: Principal | None, placement_id: UUID | str) -> None:
        """Delete a placement.

        Raises:
            AuthorizationError: If the caller may not delete placements.
            ResourceNotFoundError: If placement not found.
        """
        principal = require_permission(principal, Operation.DELETE, ResourceType.PLACEMENT)

        placement = await self._get_by_id(placement_id)
        await self.db.delete(placement)
        await self.db.commit()

        logger.info("Deleted placement: %s by %s", placement_id, principal.employee_id)

    @staticmethod
    def _check_dates(joining_date: date | None, end_date: date | None) -> None:
        if joining_date is not None and end_date is not None and end_date < joining_date:
            raise ValidationError(
                "end_date cannot be before joining_date",
                details={"joining_date": str(joining_date), "end_date": str(end_date)},
            )

    async def _ensure_exists(
        self,
        model: type[Base],
        resource_type: str,
        entity_id: UUID | str,
    ) -> None:
        result = await self.db.execute(select(model.id).where(model.id == str(entity_id)))
        if result.first() is None:
            raise ResourceNotFoundError(resource_type, entity_id)

    async def _get_by_id(self, placement_id: UUID | str) -> Placement:
        """Load a placement.

        Raises:
            ResourceNotFoundError: If placement not found.
        """
        result = await self.db.execute(select(Placement).where(Placement.id == str(placement_id)))
        placement = result.scalar_one_or_none()

        if not placement:
            raise ResourceNotFoundError("Placement", placement_id)

        return placement
