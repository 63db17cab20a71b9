# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Catalog domain package: courses and hiring partners."""

from src.domains.catalog.service import CompanyService, CourseService

__all__ = [
    "CompanyService",
    "CourseService",
]
