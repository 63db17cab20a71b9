# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course and company request models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from src.models.common import CompanyStatus, CourseStatus


class CourseCreateRequest(BaseModel):
    """Request to add a course to the catalog."""

    name: str
    description: str | None = None
    duration_months: int
    fees: Decimal
    status: CourseStatus = CourseStatus.ACTIVE


class CourseUpdateRequest(BaseModel):
    """Partial course update. Unset fields are left unchanged."""

    name: str | None = None
    description: str | None = None
    duration_months: int | None = None
    fees: Decimal | None = None
    status: CourseStatus | None = None


class CompanyCreateRequest(BaseModel):
    """Request to register a hiring partner."""

    name: str
    industry: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    partnership_date: date | None = None
    status: CompanyStatus = CompanyStatus.ACTIVE


class CompanyUpdateRequest(BaseModel):
    """Partial company update. Unset fields are left unchanged."""

    name: str | None = None
    industry: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    partnership_date: date | None = None
    status: CompanyStatus | None = None
