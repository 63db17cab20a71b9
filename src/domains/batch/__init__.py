# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch domain package.

This package provides batch management functionality including:
- Batch CRUD with course-derived end dates
- Capacity changes guarded by current enrollment
- The atomic enrollment counter used by student assignment
"""

from src.domains.batch.service import BatchService

__all__ = [
    "BatchService",
]
