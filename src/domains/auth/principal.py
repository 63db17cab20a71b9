# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""The identity a request is made as.

The identity provider authenticates credentials elsewhere and hands the
core a Principal. Services receive it as an explicit argument on every
call; there is no ambient "current user".
"""

from dataclasses import dataclass

from src.infrastructure.database.models import Employee
from src.models.common import EmployeeStatus, Role


@dataclass(frozen=True)
class Principal:
    """The calling employee's id and role.

    Attributes:
        employee_id: Employee UUID.
        role: The employee's role. None means no usable role and is
            denied everything.
    """

    employee_id: str
    role: Role | None


def resolve_principal(employee: Employee | None) -> Principal | None:
    """Build the principal for an employee record.

    Only ACTIVE employees act with their role; anyone else resolves to
    None, which the authorization gate treats as unauthenticated.

    Args:
        employee: The employee loaded by the identity provider.

    Returns:
        Principal, or None for a missing or non-active employee.
    """
    if employee is None or employee.status != EmployeeStatus.ACTIVE:
        return None
    return Principal(employee_id=str(employee.id), role=Role(employee.role))
