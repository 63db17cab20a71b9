# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Catalog services for courses and partner companies.

This module provides:
- CourseService: course CRUD; courses with batches cannot be deleted
- CompanyService: hiring partner CRUD
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.auth import Operation, Principal, ResourceType, require_permission
from src.domains.exceptions import ResourceNotFoundError, ValidationError
from src.domains.validation import (
    ensure_unique,
    normalize_email,
    require_non_blank,
    require_positive,
    require_range,
)
from src.infrastructure.database.models import Batch, Company, Course, Placement
from src.models.catalog import (
    CompanyCreateRequest,
    CompanyUpdateRequest,
    CourseCreateRequest,
    CourseUpdateRequest,
)
from src.models.common import CompanyStatus, CourseStatus

logger = logging.getLogger(__name__)

MIN_COURSE_MONTHS = 1
MAX_COURSE_MONTHS = 60


class CourseService:
    """Service for managing the course catalog.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_course(
        self,
        principal: Principal | None,
        request: CourseCreateRequest,
    ) -> Course:
        """Add a course.

        Raises:
            AuthorizationError: If the caller may not create courses.
            ValidationError: If name, duration or fees are invalid.
            DuplicateResourceError: If the name is already used.
        """
        principal = require_permission(principal, Operation.CREATE, ResourceType.COURSE)

        name = require_non_blank(request.name, "name", max_length=100)
        require_range(
            request.duration_months, "duration_months", MIN_COURSE_MONTHS, MAX_COURSE_MONTHS
        )
        require_positive(request.fees, "fees")
        await ensure_unique(self.db, Course, "Course", {"name": name})

        course = Course(
            name=name,
            description=request.description,
            duration_months=request.duration_months,
            fees=request.fees,
            status=request.status,
        )

        self.db.add(course)
        await self.db.commit()
        await self.db.refresh(course)

        logger.info("Created course: %s (%s) by %s", course.name, course.id, principal.employee_id)

        return course

    async def get_course(self, principal: Principal | None, course_id: UUID | str) -> Course:
        """Get a course by ID."""
        require_permission(principal, Operation.VIEW, ResourceType.COURSE)
        return await self._get_by_id(course_id)

    async def list_courses(
        self,
        principal: Principal | None,
        status: CourseStatus | None = None,
    ) -> list[Course]:
        """List courses ordered by name."""
        require_permission(principal, Operation.VIEW, ResourceType.COURSE)

        query = select(Course)
        if status is not None:
            query = query.where(Course.status == status)

        result = await self.db.execute(query.order_by(Course.name))
        return list(result.scalars().all())

    async def update_course(
        self,
        principal: Principal | None,
        course_id: UUID | str,
        request: CourseUpdateRequest,
    ) -> Course:
        """Update a course. Only fields set on the request are applied.

        Existing batches keep their end dates when the duration changes.

        Raises:
            AuthorizationError: If the caller may not update courses.
            ResourceNotFoundError: If course not found.
            ValidationError: If name, duration or fees are invalid.
            DuplicateResourceError: If the name belongs to another course.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.COURSE)

        course = await self._get_by_id(course_id)
        changes = request.model_dump(exclude_unset=True)
        for field in ("name", "duration_months", "fees", "status"):
            if field in changes and changes[field] is None:
                del changes[field]

        if "name" in changes:
            changes["name"] = require_non_blank(changes["name"], "name", max_length=100)
            await ensure_unique(
                self.db, Course, "Course", {"name": changes["name"]}, exclude_id=course.id
            )
        if "duration_months" in changes:
            require_range(
                changes["duration_months"], "duration_months", MIN_COURSE_MONTHS, MAX_COURSE_MONTHS
            )
        if "fees" in changes:
            require_positive(changes["fees"], "fees")

        for field, value in changes.items():
            setattr(course, field, value)

        await self.db.commit()
        await self.db.refresh(course)

        logger.info("Updated course: %s by %s", course.id, principal.employee_id)

        return course

    async def delete_course(self, principal: Principal | None, course_id: UUID | str) -> None:
        """Delete a course that no batch refers to.

        Raises:
            AuthorizationError: If the caller may not delete courses.
            ResourceNotFoundError: If course not found.
            ValidationError: If batches exist for the course.
        """
        principal = require_permission(principal, Operation.DELETE, ResourceType.COURSE)

        course = await self._get_by_id(course_id)
        batch_count = (
            await self.db.execute(
                select(func.count()).select_from(Batch).where(Batch.course_id == course.id)
            )
        ).scalar() or 0
        if batch_count:
            raise ValidationError(
                "Cannot delete course with existing batches",
                details={"course_id": course.id, "batch_count": batch_count},
            )

        await self.db.delete(course)
        await self.db.commit()

        logger.info("Deleted course: %s by %s", course_id, principal.employee_id)

    async def _get_by_id(self, course_id: UUID | str) -> Course:
        result = await self.db.execute(select(Course).where(Course.id == str(course_id)))
        course = result.scalar_one_or_none()

        if not course:
            raise ResourceNotFoundError("Course", course_id)

        return course


class CompanyService:
    """Service for managing hiring partners.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_company(
        self,
        principal: Principal | None,
        request: CompanyCreateRequest,
    ) -> Company:
        """Register a company.

        Raises:
            AuthorizationError: If the caller may not create companies.
            ValidationError: If name or phone is invalid.
            DuplicateResourceError: If name or email is already used.
        """
        principal = require_permission(principal, Operation.CREATE, ResourceType.COMPANY)

        name = require_non_blank(request.name, "name", max_length=150)
        email = normalize_email(request.email)
        await ensure_unique(self.db, Company, "Company", {"name": name, "email": email})

        company = Company(
            name=name,
            industry=request.industry,
            contact_person=request.contact_person,
            email=email,
            phone=request.phone,
            address=request.address,
            partnership_date=request.partnership_date,
            status=request.status,
        )

        self.db.add(company)
        await self.db.commit()
        await self.db.refresh(company)

        logger.info("Created company: %s (%s) by %s", company.name, company.id, principal.employee_id)

        return company

    async def get_company(self, principal: Principal | None, company_id: UUID | str) -> Company:
        """Get a company by ID."""
        require_permission(principal, Operation.VIEW, ResourceType.COMPANY)
        return await self._get_by_id(company_id)

    async def list_companies(
        self,
        principal: Principal | None,
        status: CompanyStatus | None = None,
    ) -> list[Company]:
        """List companies ordered by name."""
        require_permission(principal, Operation.VIEW, ResourceType.COMPANY)

        query = select(Company)
        if status is not None:
            query = query.where(Company.status == status)

        result = await self.db.execute(query.order_by(Company.name))
        return list(result.scalars().all())

    async def update_company(
        self,
        principal: Principal | None,
        company_id: UUID | str,
        request: CompanyUpdateRequest,
    ) -> Company:
        """Update a company. Only fields set on the request are applied.

        Raises:
            AuthorizationError: If the caller may not update companies.
            ResourceNotFoundError: If company not found.
            ValidationError: If the name is blank.
            DuplicateResourceError: If name or email belongs to another company.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.COMPANY)

        company = await self._get_by_id(company_id)
        changes = request.model_dump(exclude_unset=True)

        if "name" in changes:
            changes["name"] = require_non_blank(changes["name"], "name", max_length=150)
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
        if changes.get("status") is None:
            changes.pop("status", None)

        await ensure_unique(
            self.db,
            Company,
            "Company",
            {"name": changes.get("name"), "email": changes.get("email")},
            exclude_id=company.id,
        )

        for field, value in changes.items():
            setattr(company, field, value)

        await self.db.commit()
        await self.db.refresh(company)

        logger.info("Updated company: %s by %s", company.id, principal.employee_id)

        return company

    async def delete_company(self, principal: Principal | None, company_id: UUID | str) -> None:
        """Delete a company that has no placements.

        Raises:
            AuthorizationError: If the caller may not delete companies.
            ResourceNotFoundError: If company not found.
            ValidationError: If placements refer to the company.
        """
        principal = require_permission(principal, Operation.DELETE, ResourceType.COMPANY)

        company = await self._get_by_id(company_id)
        placement_count = (
            await self.db.execute(
                select(func.count()).select_from(Placement).where(Placement.company_id == company.id)
            )
        ).scalar() or 0
        if placement_count:
            raise ValidationError(
                "Cannot delete company with existing placements",
                details={"company_id": company.id, "placement_count": placement_count},
            )

        await self.db.delete(company)
        await self.db.commit()

        logger.info("Deleted company: %s by %s", company_id, principal.employee_id)

    async def _get_by_id(self, company_id: UUID | str) -> Company:
        result = await self.db.execute(select(Company).where(Company.id == str(company_id)))
        company = result.scalar_one_or_none()

        if not company:
            raise ResourceNotFoundError("Company", company_id)

        return company
