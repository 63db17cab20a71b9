# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lead request models."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel

from src.models.common import LeadStatus


class LeadCreateRequest(BaseModel):
    """Request to record a new lead. Leads always start as NEW."""

    first_name: str
    last_name: str
    email: str | None = None
    phone: str
    course_interest: str | None = None
    source: str | None = None
    notes: str | None = None
    counsellor_id: UUID | None = None
    next_follow_up_at: datetime | None = None


class LeadUpdateRequest(BaseModel):
    """Partial lead update. Unset fields are left unchanged."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    status: LeadStatus | None = None
    course_interest: str | None = None
    source: str | None = None
    notes: str | None = None
    counsellor_id: UUID | None = None
    next_follow_up_at: datetime | None = None


class LeadConversionRequest(BaseModel):
    """Details needed to turn a lead into a student."""

    enrollment_date: date
    address: str | None = None
    date_of_birth: date | None = None
    batch_id: UUID | None = None
