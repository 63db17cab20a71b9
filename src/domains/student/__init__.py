# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

This package provides student management functionality including:
- Enrollment with year-prefixed enrollment numbers
- Atomic batch assignment and moves
- Status history and graduation
"""

from src.domains.student.service import StudentService

__all__ = [
    "StudentService",
]
