# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lead service for the counselling funnel.

This module provides the LeadService class for:
- Lead CRUD with unique contact details and counsellor assignment
- Status transitions along the funnel
- Follow-up logging and scheduling
- Conversion of a lead into a student

Funnel transitions::

    NEW -> CONTACTED -> INTERESTED -> NOT_INTERESTED
    NEW | CONTACTED | INTERESTED | NOT_INTERESTED -> LOST
    NEW | CONTACTED | INTERESTED -> CONVERTED (conversion only)

CONVERTED and LOST have no outgoing transitions. A converted lead can no
longer be edited, followed up or deleted.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import EnrollmentSettings
from src.domains.auth import Operation, Principal, ResourceType, require_permission
from src.domains.exceptions import (
    LeadConversionError,
    ResourceNotFoundError,
    ValidationError,
)
from src.domains.student.service import StudentService
from src.domains.validation import (
    ensure_unique,
    normalize_email,
    require_non_blank,
    require_phone,
)
from src.infrastructure.database.models import Employee, Lead, LeadFollowUp, Student
from src.infrastructure.database.transaction import atomic
from src.models.common import LeadStatus, Role
from src.models.lead import LeadConversionRequest, LeadCreateRequest, LeadUpdateRequest
from src.models.student import StudentCreateRequest
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[LeadStatus, frozenset[LeadStatus]] = {
    LeadStatus.NEW: frozenset({LeadStatus.CONTACTED, LeadStatus.LOST}),
    LeadStatus.CONTACTED: frozenset({LeadStatus.INTERESTED, LeadStatus.LOST}),
    LeadStatus.INTERESTED: frozenset({LeadStatus.NOT_INTERESTED, LeadStatus.LOST}),
    LeadStatus.NOT_INTERESTED: frozenset({LeadStatus.LOST}),
    LeadStatus.CONVERTED: frozenset(),
    LeadStatus.LOST: frozenset(),
}

# Statuses a lead may be converted from; also the "still in the funnel" set
CONVERTIBLE_STATUSES = frozenset({LeadStatus.NEW, LeadStatus.CONTACTED, LeadStatus.INTERESTED})


def can_transition(current: LeadStatus, target: LeadStatus) -> bool:
    """Check whether a manual status change is allowed.

    Keeping the current status is always allowed. CONVERTED is never a
    manual target.
    """
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


class LeadService:
    """Service for managing leads.

    Attributes:
        db: Async database session.
        students: Student service sharing the same session, used for conversion.
    """

    def __init__(self, db: AsyncSession, settings: EnrollmentSettings | None = None) -> None:
        """Initialize lead service.

        Args:
            db: Async database session.
            settings: Enrollment settings used when converting leads.
        """
        self.db = db
        self.students = StudentService(db, settings)

    async def create_lead(
        self,
        principal: Principal | None,
        request: LeadCreateRequest,
    ) -> Lead:
        """Record a new lead in status NEW.

        Raises:
            AuthorizationError: If the caller may not create leads.
            ValidationError: If a field is malformed or the assigned
                employee is not a counsellor.
            DuplicateResourceError: If email or phone is already used.
            ResourceNotFoundError: If the counsellor does not exist.
        """
        principal = require_permission(principal, Operation.CREATE, ResourceType.LEAD)

        first_name = require_non_blank(request.first_name, "first_name", max_length=50)
        last_name = require_non_blank(request.last_name, "last_name", max_length=50)
        phone = require_phone(request.phone)
        email = normalize_email(request.email)

        await ensure_unique(self.db, Lead, "Lead", {"email": email, "phone": phone})

        counsellor_id = None
        if request.counsellor_id is not None:
            counsellor_id = (await self._get_counsellor(request.counsellor_id)).id

        lead = Lead(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            status=LeadStatus.NEW,
            course_interest=request.course_interest,
            source=request.source,
            notes=request.notes,
            counsellor_id=counsellor_id,
            next_follow_up_at=ensure_utc(request.next_follow_up_at),
        )

        self.db.add(lead)
        await self.db.commit()
        await self.db.refresh(lead)

        logger.info("Created lead: %s (%s) by %s", lead.full_name, lead.id, principal.employee_id)

        return lead

    async def get_lead(self, principal: Principal | None, lead_id: UUID | str) -> Lead:
        """Get a lead by ID with its follow-up log.

        Raises:
            AuthorizationError: If the caller may not view leads.
            ResourceNotFoundError: If lead not found.
        """
        require_permission(principal, Operation.VIEW, ResourceType.LEAD)
        return await self._get_by_id(lead_id)

    async def list_leads(
        self,
        principal: Principal | None,
        status: LeadStatus | None = None,
        counsellor_id: UUID | str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Lead], int]:
        """List leads with filtering, newest first.

        Returns:
            Tuple of (list of leads, total count).
        """
        require_permission(principal, Operation.VIEW, ResourceType.LEAD)

        conditions = []
        if status is not None:
            conditions.append(Lead.status == status)
        if counsellor_id is not None:
            conditions.append(Lead.counsellor_id == str(counsellor_id))

        query = select(Lead)
        count_query = select(func.count()).select_from(Lead)
        if conditions:
            query = query.where(and_(*conditions))
            count_query = count_query.where(and_(*conditions))

        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(Lead.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total

    async def list_leads_due_for_follow_up(
        self,
        principal: Principal | None,
        as_of: datetime | None = None,
    ) -> list[Lead]:
        """Leads still in the funnel whose next follow-up is at or before ``as_of``."""
        require_permission(principal, Operation.VIEW, ResourceType.LEAD)

        cutoff = ensure_utc(as_of) or utc_now()
        result = await self.db.execute(
            select(Lead)
            .where(
                Lead.next_follow_up_at <= cutoff,
                Lead.status.in_(CONVERTIBLE_STATUSES),
            )
            .order_by(Lead.next_follow_up_at)
        )
        return list(result.scalars().all())

    async def list_leads_without_follow_up(self, principal: Principal | None) -> list[Lead]:
        """Leads still in the funnel with no follow-up scheduled."""
        require_permission(principal, Operation.VIEW, ResourceType.LEAD)

        result = await self.db.execute(
            select(Lead)
            .where(
                Lead.next_follow_up_at.is_(None),
                Lead.status.in_(CONVERTIBLE_STATUSES),
            )
            .order_by(Lead.created_at)
        )
        return list(result.scalars().all())

    async def update_lead(
        self,
        principal: Principal | None,
        lead_id: UUID | str,
        request: LeadUpdateRequest,
    ) -> Lead:
        """Update a lead that has not been converted.

        Only fields that were set on the request are applied. A status
        change must follow the funnel transitions.

        Raises:
            AuthorizationError: If the caller may not update leads.
            ResourceNotFoundError: If lead or counsellor not found.
            ValidationError: If the lead is CONVERTED, a field is malformed,
                or the status transition is not allowed.
            DuplicateResourceError: If email or phone is used by another lead.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.LEAD)

        lead = await self._get_by_id(lead_id)
        self._ensure_not_converted(lead, "update")
        changes = request.model_dump(exclude_unset=True)

        for field in ("first_name", "last_name"):
            if field in changes:
                changes[field] = require_non_blank(changes[field], field, max_length=50)
        if "phone" in changes:
            changes["phone"] = require_phone(changes["phone"])
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
        if "next_follow_up_at" in changes:
            changes["next_follow_up_at"] = ensure_utc(changes["next_follow_up_at"])

        await ensure_unique(
            self.db,
            Lead,
            "Lead",
            {"email": changes.get("email"), "phone": changes.get("phone")},
            exclude_id=lead.id,
        )

        if changes.get("counsellor_id") is not None:
            changes["counsellor_id"] = (await self._get_counsellor(changes["counsellor_id"])).id

        new_status = changes.pop("status", None)
        if new_status is not None:
            self._check_transition(lead.status, new_status)
            lead.status = new_status

        for field, value in changes.items():
            setattr(lead, field, value)

        await self.db.commit()
        await self.db.refresh(lead)

        logger.info("Updated lead: %s by %s", lead.id, principal.employee_id)

        return lead

    async def add_follow_up(
        self,
        principal: Principal | None,
        lead_id: UUID | str,
        notes: str,
        next_follow_up_at: datetime | None = None,
    ) -> Lead:
        """Log a follow-up and schedule (or clear) the next one.

        Args:
            principal: Calling employee.
            lead_id: Lead identifier.
            notes: What happened on this follow-up.
            next_follow_up_at: When to follow up next, None for no further action.

        Returns:
            The lead with the new entry at the end of its follow-up log.

        Raises:
            AuthorizationError: If the caller may not update leads.
            ResourceNotFoundError: If lead not found.
            ValidationError: If the lead is CONVERTED or notes are blank.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.LEAD)

        lead = await self._get_by_id(lead_id)
        self._ensure_not_converted(lead, "add follow-up to")
        notes = require_non_blank(notes, "notes")

        next_follow_up_at = ensure_utc(next_follow_up_at)
        if next_follow_up_at is not None:
            next_action = f"Follow up on {next_follow_up_at.date().isoformat()}"
        else:
            next_action = "No further action"

        lead.follow_ups.append(
            LeadFollowUp(followed_up_at=utc_now(), notes=notes, next_action=next_action)
        )
        lead.next_follow_up_at = next_follow_up_at

        await self.db.commit()

        logger.info("Added follow-up to lead %s by %s", lead.id, principal.employee_id)

        return await self._get_by_id(lead.id)

    async def convert_to_student(
        self,
        principal: Principal | None,
        lead_id: UUID | str,
        request: LeadConversionRequest,
    ) -> Student:
        """Convert a lead into a student.

        The lead's status flip is a conditional UPDATE on its current
        status, so of two concurrent conversions only one succeeds. The
        status flip and the student creation commit together.

        Args:
            principal: Calling employee.
            lead_id: Lead identifier.
            request: Enrollment date and student-only details.

        Returns:
            The new student, whose ``lead_id`` is this lead.

        Raises:
            AuthorizationError: If the caller may not convert leads.
            ResourceNotFoundError: If lead or batch not found.
            LeadConversionError: If the lead is CONVERTED, NOT_INTERESTED or LOST.
            DuplicateResourceError: If the lead's email or phone already
                belongs to a student.
            CapacityExceededError: If the requested batch is full.
        """
        principal = require_permission(principal, Operation.CONVERT, ResourceType.LEAD)

        lead = await self._get_by_id(lead_id)
        lead_id = lead.id
        self._ensure_convertible(lead_id, lead.status)

        async with atomic(self.db):
            result = await self.db.execute(
                update(Lead)
                .where(Lead.id == lead_id, Lead.status.in_(CONVERTIBLE_STATUSES))
                .values(status=LeadStatus.CONVERTED, converted_at=utc_now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                current = (
                    await self.db.execute(select(Lead.status).where(Lead.id == lead_id))
                ).scalar_one()
                self._ensure_convertible(lead_id, current)

            student = await self.students.register_student(
                StudentCreateRequest(
                    first_name=lead.first_name,
                    last_name=lead.last_name,
                    email=lead.email,
                    phone=lead.phone,
                    address=request.address,
                    date_of_birth=request.date_of_birth,
                    enrollment_date=request.enrollment_date,
                    batch_id=request.batch_id,
                    lead_id=lead_id,
                )
            )

        logger.info(
            "Converted lead %s to student %s (%s) by %s",
            lead_id,
            student.enrollment_number,
            student.id,
            principal.employee_id,
        )

        return student

    async def delete_lead(self, principal: Principal | None, lead_id: UUID | str) -> None:
        """Delete a lead that has not been converted.

        Raises:
            AuthorizationError: If the caller may not delete leads.
            ResourceNotFoundError: If lead not found.
            ValidationError: If the lead is CONVERTED.
        """
        principal = require_permission(principal, Operation.DELETE, ResourceType.LEAD)

        lead = await self._get_by_id(lead_id)
        self._ensure_not_converted(lead, "delete")

        await self.db.delete(lead)
        await self.db.commit()

        logger.info("Deleted lead: %s by %s", lead_id, principal.employee_id)

    @staticmethod
    def _ensure_not_converted(lead: Lead, action: str) -> None:
        if lead.status == LeadStatus.CONVERTED:
            raise ValidationError(
                f"Cannot {action} converted lead",
                details={"lead_id": lead.id},
            )

    @staticmethod
    def _ensure_convertible(lead_id: str, status: LeadStatus) -> None:
        if status == LeadStatus.CONVERTED:
            raise LeadConversionError("Lead is already converted", lead_id, status.value)
        if status not in CONVERTIBLE_STATUSES:
            raise LeadConversionError(
                f"Cannot convert lead with status: {status.value}",
                lead_id,
                status.value,
            )

    @staticmethod
    def _check_transition(current: LeadStatus, target: LeadStatus) -> None:
        if target == LeadStatus.CONVERTED and current != target:
            raise ValidationError(
                "Leads can only be marked CONVERTED by converting them to a student",
                details={"from": current.value, "to": target.value},
            )
        if not can_transition(current, target):
            raise ValidationError(
                f"Invalid lead status transition from {current.value} to {target.value}",
                details={"from": current.value, "to": target.value},
            )

    async def _get_counsellor(self, employee_id: UUID | str) -> Employee:
        """Resolve an employee that must hold the COUNSELLOR role.

        Raises:
            ResourceNotFoundError: If employee not found.
            ValidationError: If the employee is not a counsellor.
        """
        result = await self.db.execute(select(Employee).where(Employee.id == str(employee_id)))
        employee = result.scalar_one_or_none()

        if not employee:
            raise ResourceNotFoundError("Employee", employee_id)
        if employee.role != Role.COUNSELLOR:
            raise ValidationError(
                "Assigned employee must have COUNSELLOR role",
                details={"employee_id": employee.id, "role": employee.role.value},
            )

        return employee

    async def _get_by_id(self, lead_id: UUID | str) -> Lead:
        """Load a lead, always overwriting any stale in-session copy.

        Raises:
            ResourceNotFoundError: If lead not found.
        """
        result = await self.db.execute(
            select(Lead)
            .where(Lead.id == str(lead_id))
            .execution_options(populate_existing=True)
        )
        lead = result.scalar_one_or_none()

        if not lead:
            raise ResourceNotFoundError("Lead", lead_id)

        return lead
