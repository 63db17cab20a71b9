# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch request models."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel

from src.models.common import BatchStatus


class BatchCreateRequest(BaseModel):
    """Request to open a new batch for a course.

    The end date is not accepted; it is derived from the course duration.
    """

    name: str
    course_id: UUID
    start_date: date
    capacity: int
    status: BatchStatus | None = None
    instructor_id: UUID | None = None


class BatchUpdateRequest(BaseModel):
    """Partial batch update. Unset fields are left unchanged."""

    name: str | None = None
    course_id: UUID | None = None
    start_date: date | None = None
    capacity: int | None = None
    status: BatchStatus | None = None
    instructor_id: UUID | None = None
