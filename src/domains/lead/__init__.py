# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Lead domain package.

This package provides the counselling funnel including:
- Lead CRUD and counsellor assignment
- Funnel status transitions
- Follow-up logging
- Conversion into students
"""

from src.domains.lead.service import (
    ALLOWED_TRANSITIONS,
    CONVERTIBLE_STATUSES,
    LeadService,
    can_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CONVERTIBLE_STATUSES",
    "LeadService",
    "can_transition",
]
