# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Employee request models."""

from datetime import date

from pydantic import BaseModel

from src.models.common import EmployeeStatus, Role


class EmployeeCreateRequest(BaseModel):
    """Request to add a staff member."""

    employee_code: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    role: Role
    department: str | None = None
    hire_date: date | None = None


class EmployeeUpdateRequest(BaseModel):
    """Partial employee update. Unset fields are left unchanged."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    role: Role | None = None
    department: str | None = None
    hire_date: date | None = None
    status: EmployeeStatus | None = None
