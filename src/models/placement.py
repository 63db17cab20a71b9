# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement request models."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from src.models.common import EmploymentType, JobType, PlacementStatus


class PlacementCreateRequest(BaseModel):
    """Request to record a placement. New placements are PLACED."""

    student_id: UUID
    company_id: UUID
    position: str
    salary: Decimal | None = None
    placement_date: date
    job_type: JobType | None = None
    employment_type: EmploymentType | None = None
    work_location: str | None = None
    joining_date: date | None = None
    end_date: date | None = None
    probation_months: int | None = None
    notes: str | None = None


class PlacementUpdateRequest(BaseModel):
    """Partial placement update. Unset fields are left unchanged."""

    position: str | None = None
    salary: Decimal | None = None
    placement_date: date | None = None
    status: PlacementStatus | None = None
    job_type: JobType | None = None
    employment_type: EmploymentType | None = None
    work_location: str | None = None
    joining_date: date | None = None
    end_date: date | None = None
    probation_months: int | None = None
    notes: str | None = None
