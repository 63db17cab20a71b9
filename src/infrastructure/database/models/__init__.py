# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the institute database.

Aggregates reference each other by id only. The single exception is the
owned, append-only logs (student status history, lead follow-ups), which
are mapped as collections of their owner.
"""

from src.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    generate_uuid,
)
from src.infrastructure.database.models.catalog import Batch, Company, Course
from src.infrastructure.database.models.lead import Lead, LeadFollowUp
from src.infrastructure.database.models.placement import Placement
from src.infrastructure.database.models.staff import Employee
from src.infrastructure.database.models.student import Student, StudentStatusHistory

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "generate_uuid",
    # Catalog
    "Course",
    "Batch",
    "Company",
    # Staff
    "Employee",
    # Funnel
    "Lead",
    "LeadFollowUp",
    # Students
    "Student",
    "StudentStatusHistory",
    "Placement",
]
