# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request models."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel

from src.models.common import StudentStatus


class StudentCreateRequest(BaseModel):
    """Request to enroll a student directly.

    The enrollment number is always generated. Omitting the enrollment
    date enrolls the student today.
    """

    first_name: str
    last_name: str
    email: str | None = None
    phone: str
    date_of_birth: date | None = None
    address: str | None = None
    enrollment_date: date | None = None
    batch_id: UUID | None = None
    lead_id: UUID | None = None


class StudentUpdateRequest(BaseModel):
    """Partial student update.

    Only fields that were explicitly set are applied, so sending
    ``batch_id=None`` removes the student from their batch while leaving
    ``batch_id`` out keeps it.
    """

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    status: StudentStatus | None = None
    batch_id: UUID | None = None
