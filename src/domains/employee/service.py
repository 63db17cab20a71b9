# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Employee service for the staff directory.

This module provides the EmployeeService class for:
- Staff CRUD with unique code, email and phone
- Deactivation, after which the employee resolves to no principal
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.auth import Operation, Principal, ResourceType, require_permission
from src.domains.exceptions import ResourceNotFoundError
from src.domains.validation import (
    ensure_unique,
    normalize_email,
    require_non_blank,
    require_phone,
)
from src.infrastructure.database.models import Employee
from src.models.common import EmployeeStatus, Role
from src.models.employee import EmployeeCreateRequest, EmployeeUpdateRequest

logger = logging.getLogger(__name__)


class EmployeeService:
    """Service for managing staff members.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_employee(
        self,
        principal: Principal | None,
        request: EmployeeCreateRequest,
    ) -> Employee:
        """Add a staff member in status ACTIVE.

        Raises:
            AuthorizationError: If the caller is not an admin.
            ValidationError: If a field is malformed.
            DuplicateResourceError: If code, email or phone is already used.
        """
        principal = require_permission(principal, Operation.CREATE, ResourceType.EMPLOYEE)

        code = require_non_blank(request.employee_code, "employee_code", max_length=20)
        email = normalize_email(require_non_blank(request.email, "email", max_length=255))
        phone = require_phone(request.phone) if request.phone is not None else None

        await ensure_unique(
            self.db,
            Employee,
            "Employee",
            {"employee_code": code, "email": email, "phone": phone},
        )

        employee = Employee(
            employee_code=code,
            first_name=require_non_blank(request.first_name, "first_name", max_length=50),
            last_name=require_non_blank(request.last_name, "last_name", max_length=50),
            email=email,
            phone=phone,
            role=request.role,
            department=request.department,
            hire_date=request.hire_date,
            status=EmployeeStatus.ACTIVE,
        )

        self.db.add(employee)
        await self.db.commit()
        await self.db.refresh(employee)

        logger.info(
            "Created employee: %s (%s) as %s by %s",
            employee.employee_code,
            employee.id,
            employee.role.value,
            principal.employee_id,
        )

        return employee

    async def get_employee(self, principal: Principal | None, employee_id: UUID | str) -> Employee:
        """Get an employee by ID."""
        require_permission(principal, Operation.VIEW, ResourceType.EMPLOYEE)
        return await self._get_by_id(employee_id)

    async def list_employees(
        self,
        principal: Principal | None,
        role: Role | None = None,
        status: EmployeeStatus | None = None,
    ) -> list[Employee]:
        """List employees ordered by employee code."""
        require_permission(principal, Operation.VIEW, ResourceType.EMPLOYEE)

        conditions = []
        if role is not None:
            conditions.append(Employee.role == role)
        if status is not None:
            conditions.append(Employee.status == status)

        query = select(Employee)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.db.execute(query.order_by(Employee.employee_code))
        return list(result.scalars().all())

    async def update_employee(
        self,
        principal: Principal | None,
        employee_id: UUID | str,
        request: EmployeeUpdateRequest,
    ) -> Employee:
        """Update an employee. Only fields set on the request are applied.

        Raises:
            AuthorizationError: If the caller is not an admin.
            ResourceNotFoundError: If employee not found.
            ValidationError: If a field is malformed.
            DuplicateResourceError: If email or phone belongs to someone else.
        """
        principal = require_permission(principal, Operation.UPDATE, ResourceType.EMPLOYEE)

        employee = await self._get_by_id(employee_id)
        changes = request.model_dump(exclude_unset=True)

        for field in ("first_name", "last_name"):
            if field in changes:
                changes[field] = require_non_blank(changes[field], field, max_length=50)
        if "email" in changes:
            changes["email"] = normalize_email(require_non_blank(changes["email"], "email"))
        if changes.get("phone") is not None:
            changes["phone"] = require_phone(changes["phone"])
        for field in ("role", "status"):
            if field in changes and changes[field] is None:
                del changes[field]

        await ensure_unique(
            self.db,
            Employee,
            "Employee",
            {"email": changes.get("email"), "phone": changes.get("phone")},
            exclude_id=employee.id,
        )

        for field, value in changes.items():
            setattr(employee, field, value)

        await self.db.commit()
        await self.db.refresh(employee)

        logger.info("Updated employee: %s by %s", employee.id, principal.employee_id)

        return employee

    async def deactivate_employee(
        self,
        principal: Principal | None,
        employee_id: UUID | str,
    ) -> Employee:
        """Mark an employee INACTIVE so they can no longer act."""
        principal = require_permission(principal, Operation.UPDATE_STATUS, ResourceType.EMPLOYEE)

        employee = await self._get_by_id(employee_id)
        employee.status = EmployeeStatus.INACTIVE

        await self.db.commit()
        await self.db.refresh(employee)

        logger.info("Deactivated employee: %s by %s", employee.id, principal.employee_id)

        return employee

    async def delete_employee(self, principal: Principal | None, employee_id: UUID | str) -> None:
        """Delete an employee. Leads and batches they were assigned to keep no reference."""
        principal = require_permission(principal, Operation.DELETE, ResourceType.EMPLOYEE)

        employee = await self._get_by_id(employee_id)
        await self.db.delete(employee)
        await self.db.commit()

        logger.info("Deleted employee: %s by %s", employee_id, principal.employee_id)

    async def _get_by_id(self, employee_id: UUID | str) -> Employee:
        result = await self.db.execute(select(Employee).where(Employee.id == str(employee_id)))
        employee = result.scalar_one_or_none()

        if not employee:
            raise ResourceNotFoundError("Employee", employee_id)

        return employee
