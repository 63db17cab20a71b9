# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Role permission matrix and the authorization gate.

``authorize`` is a pure lookup of (role, operation, resource type) in a
fixed table. ``require_permission`` is called first thing in every public
service method, before the session is touched, and raises
AuthorizationError on denial. Anything missing from the table is denied.
"""

import logging
from enum import Enum
from typing import Optional

from src.domains.auth.principal import Principal
from src.domains.exceptions import AuthorizationError
from src.models.common import Role

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    """Operations subject to authorization."""

    CREATE = "CREATE"
    VIEW = "VIEW"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UPDATE_CAPACITY = "UPDATE_CAPACITY"
    UPDATE_STATUS = "UPDATE_STATUS"
    CONVERT = "CONVERT"
    CHECK_AVAILABILITY = "CHECK_AVAILABILITY"


class ResourceType(str, Enum):
    """Resource types subject to authorization."""

    BATCH = "BATCH"
    LEAD = "LEAD"
    STUDENT = "STUDENT"
    PLACEMENT = "PLACEMENT"
    EMPLOYEE = "EMPLOYEE"
    COURSE = "COURSE"
    COMPANY = "COMPANY"


ALL_ROLES = frozenset(Role)
ADMIN_ONLY = frozenset({Role.ADMIN})
ADMIN_OPERATIONS = frozenset({Role.ADMIN, Role.OPERATIONS})
ADMIN_COUNSELLOR = frozenset({Role.ADMIN, Role.COUNSELLOR})
ADMIN_PLACEMENT = frozenset({Role.ADMIN, Role.PLACEMENT_OFFICER})

PERMISSION_MATRIX: dict[tuple[ResourceType, Operation], frozenset[Role]] = {
    # Batches
    (ResourceType.BATCH, Operation.CREATE): ADMIN_OPERATIONS,
    (ResourceType.BATCH, Operation.UPDATE): ADMIN_OPERATIONS,
    (ResourceType.BATCH, Operation.UPDATE_CAPACITY): ADMIN_OPERATIONS,
    (ResourceType.BATCH, Operation.UPDATE_STATUS): ADMIN_OPERATIONS,
    (ResourceType.BATCH, Operation.DELETE): ADMIN_ONLY,
    (ResourceType.BATCH, Operation.VIEW): frozenset({Role.ADMIN, Role.OPERATIONS, Role.FACULTY}),
    (ResourceType.BATCH, Operation.CHECK_AVAILABILITY): frozenset(
        {Role.ADMIN, Role.OPERATIONS, Role.COUNSELLOR}
    ),
    # Leads
    (ResourceType.LEAD, Operation.CREATE): ADMIN_COUNSELLOR,
    (ResourceType.LEAD, Operation.UPDATE): ADMIN_COUNSELLOR,
    (ResourceType.LEAD, Operation.DELETE): ADMIN_COUNSELLOR,
    (ResourceType.LEAD, Operation.VIEW): ADMIN_COUNSELLOR,
    (ResourceType.LEAD, Operation.CONVERT): ADMIN_COUNSELLOR,
    # Students
    (ResourceType.STUDENT, Operation.CREATE): ADMIN_COUNSELLOR,
    (ResourceType.STUDENT, Operation.UPDATE): ADMIN_COUNSELLOR,
    (ResourceType.STUDENT, Operation.UPDATE_STATUS): ADMIN_COUNSELLOR,
    (ResourceType.STUDENT, Operation.VIEW): frozenset({Role.ADMIN, Role.COUNSELLOR, Role.FACULTY}),
    (ResourceType.STUDENT, Operation.DELETE): ADMIN_ONLY,
    # Placements
    (ResourceType.PLACEMENT, Operation.CREATE): ADMIN_PLACEMENT,
    (ResourceType.PLACEMENT, Operation.UPDATE): ADMIN_PLACEMENT,
    (ResourceType.PLACEMENT, Operation.UPDATE_STATUS): ADMIN_PLACEMENT,
    (ResourceType.PLACEMENT, Operation.VIEW): ADMIN_PLACEMENT,
    (ResourceType.PLACEMENT, Operation.DELETE): ADMIN_ONLY,
    # Employees
    (ResourceType.EMPLOYEE, Operation.CREATE): ADMIN_ONLY,
    (ResourceType.EMPLOYEE, Operation.UPDATE): ADMIN_ONLY,
    (ResourceType.EMPLOYEE, Operation.UPDATE_STATUS): ADMIN_ONLY,
    (ResourceType.EMPLOYEE, Operation.DELETE): ADMIN_ONLY,
    (ResourceType.EMPLOYEE, Operation.VIEW): ALL_ROLES,
    # Courses
    (ResourceType.COURSE, Operation.CREATE): ADMIN_OPERATIONS,
    (ResourceType.COURSE, Operation.UPDATE): ADMIN_OPERATIONS,
    (ResourceType.COURSE, Operation.DELETE): ADMIN_ONLY,
    (ResourceType.COURSE, Operation.VIEW): ALL_ROLES,
    # Companies
    (ResourceType.COMPANY, Operation.CREATE): ADMIN_PLACEMENT,
    (ResourceType.COMPANY, Operation.UPDATE): ADMIN_PLACEMENT,
    (ResourceType.COMPANY, Operation.VIEW): ADMIN_PLACEMENT,
    (ResourceType.COMPANY, Operation.DELETE): ADMIN_ONLY,
}


def allowed_roles(operation: Operation, resource_type: ResourceType) -> frozenset[Role]:
    """Roles permitted to perform an operation on a resource type."""
    return PERMISSION_MATRIX.get((resource_type, operation), frozenset())


def authorize(
    role: Optional[Role],
    operation: Operation,
    resource_type: ResourceType,
) -> bool:
    """Decide whether a role may perform an operation on a resource type.

    Args:
        role: The caller's role. None (unauthenticated) is always denied.
        operation: The operation being attempted.
        resource_type: The resource type it targets.

    Returns:
        True if allowed, False otherwise.
    """
    if role is None:
        return False
    return role in allowed_roles(operation, resource_type)


def require_permission(
    principal: Optional[Principal],
    operation: Operation,
    resource_type: ResourceType,
) -> Principal:
    """Gate an operation on the caller's role.

    Args:
        principal: The calling principal, None when unauthenticated.
        operation: The operation being attempted.
        resource_type: The resource type it targets.

    Returns:
        The authorized principal.

    Raises:
        AuthorizationError: If the caller is unauthenticated or its role
            is not allowed.
    """
    role = principal.role if principal is not None else None
    if principal is None or not authorize(role, operation, resource_type):
        logger.warning(
            "Access denied: %s %s for employee=%s role=%s",
            operation.value,
            resource_type.value,
            principal.employee_id if principal is not None else None,
            role.value if role is not None else None,
        )
        raise AuthorizationError(
            operation.value,
            resource_type.value,
            role.value if role is not None else None,
        )
    return principal
