# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Employee domain package."""

from src.domains.employee.service import EmployeeService

__all__ = [
    "EmployeeService",
]
