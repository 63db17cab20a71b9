# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the institute backend.

This package contains domain services that encapsulate business logic.
Every public operation takes the calling principal, passes the
authorization gate, and then mutates entities inside one transaction.

Domains:
    auth: Role permission matrix and principals.
    batch: Batch capacity and enrollment counters.
    lead: Lead lifecycle, follow-ups and conversion.
    student: Student lifecycle, enrollment numbers and batch assignment.
    placement: Placement records and derived tenure facts.
    employee: Staff directory.
    catalog: Courses and partner companies.
"""
