"""Ownership-based authorization for feedback operations.

Only instructors may touch feedback at all. Single-resource operations
additionally require the caller to own the record; creation has no owner
yet (the caller becomes it) and listings are always scoped to the caller.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from app.schemas.common import Principal, UserRole
from app.services.errors import AuthorizationError

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    CREATE = "create"
    READ = "read"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"


# Operations that act on one existing record and so need a matching owner.
OWNED_OPERATIONS = frozenset({Operation.READ, Operation.UPDATE, Operation.DELETE})


class AuthorizationGuard:
    def authorize(
        self,
        principal: Principal,
        operation: Operation,
        resource_owner_id: Optional[int] = None,
    ) -> bool:
        """Return True when ``principal`` may perform ``operation``."""
        if principal.role != UserRole.INSTRUCTOR:
            return False
        if operation in OWNED_OPERATIONS:
            return resource_owner_id is not None and principal.id == resource_owner_id
        if operation == Operation.CREATE:
            return resource_owner_id is None
        return operation == Operation.LIST

    def require(
        self,
        principal: Principal,
        operation: Operation,
        resource_owner_id: Optional[int] = None,
    ) -> None:
        """Like ``authorize`` but raises AuthorizationError on deny."""
        if not self.authorize(principal, operation, resource_owner_id):
            logger.warning(
                "Denied %s for principal %s (role=%s, owner=%s)",
                operation.value, principal.id, principal.role.value, resource_owner_id,
            )
            if principal.role != UserRole.INSTRUCTOR:
                raise AuthorizationError(f"Only instructors may {operation.value} feedback")
            raise AuthorizationError()
