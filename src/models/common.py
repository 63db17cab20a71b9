# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enumerations for the institute domain.

Values equal member names so they read the same in the database, in logs
and in API payloads.
"""

from enum import Enum


class Role(str, Enum):
    """Staff role. Input to every authorization decision."""

    ADMIN = "ADMIN"
    COUNSELLOR = "COUNSELLOR"
    FACULTY = "FACULTY"
    PLACEMENT_OFFICER = "PLACEMENT_OFFICER"
    OPERATIONS = "OPERATIONS"


class EmployeeStatus(str, Enum):
    """Employment status of a staff member."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TERMINATED = "TERMINATED"


class CourseStatus(str, Enum):
    """Catalog status of a course."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"


class CompanyStatus(str, Enum):
    """Partnership status of a hiring company."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    BLACKLISTED = "BLACKLISTED"


class BatchStatus(str, Enum):
    """Lifecycle status of a batch."""

    PLANNED = "PLANNED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class LeadStatus(str, Enum):
    """Funnel status of a lead."""

    NEW = "NEW"
    CONTACTED = "CONTACTED"
    INTERESTED = "INTERESTED"
    NOT_INTERESTED = "NOT_INTERESTED"
    CONVERTED = "CONVERTED"
    LOST = "LOST"


class StudentStatus(str, Enum):
    """Academic status of a student."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    GRADUATED = "GRADUATED"
    DROPPED_OUT = "DROPPED_OUT"
    SUSPENDED = "SUSPENDED"


class PlacementStatus(str, Enum):
    """Status of a placement record."""

    PLACED = "PLACED"
    RESIGNED = "RESIGNED"
    TERMINATED = "TERMINATED"
    COMPLETED = "COMPLETED"


class JobType(str, Enum):
    """Kind of job a student was placed in."""

    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    FREELANCE = "FREELANCE"


class EmploymentType(str, Enum):
    """Contractual basis of a placement."""

    PERMANENT = "PERMANENT"
    TEMPORARY = "TEMPORARY"
    PROBATION = "PROBATION"
    CONSULTANT = "CONSULTANT"
