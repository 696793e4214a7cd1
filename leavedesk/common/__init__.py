"""Common module — shared utilities for LeaveDesk."""

from leavedesk.common.constants import (
    RESTRICTED_EVENT_TYPES,
    REVIEWER_ROLES,
    TERMINAL_STATUSES,
    ActorRole,
    LeaveCategory,
    LeaveStatus,
    ReviewStage,
)
from leavedesk.common.exceptions import (
    AppException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    StateException,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Constants / Enums
    "ActorRole",
    "LeaveCategory",
    "LeaveStatus",
    "ReviewStage",
    "RESTRICTED_EVENT_TYPES",
    "REVIEWER_ROLES",
    "TERMINAL_STATUSES",
    # Exceptions
    "AppException",
    "ConflictException",
    "ForbiddenException",
    "NotFoundException",
    "StateException",
    "ValidationException",
    "register_exception_handlers",
]
