"""Error taxonomy for entity validation and allocation rules."""

from __future__ import annotations

from enum import Enum


class ConservationError(Exception):
    """Base class for every recoverable error raised by the conservation core."""


class ValidationErrorKind(str, Enum):
    NULL_OR_EMPTY_FIELD = "null_or_empty_field"
    INVALID_RANGE = "invalid_range"
    IMMUTABLE_FIELD = "immutable_field"


class ValidationError(ConservationError):
    """Raised when an entity field is given a value it cannot hold.

    The entity is left exactly as it was before the failing call.
    """

    def __init__(self, kind: ValidationErrorKind, field: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.field = field


class EntityNotFoundError(ConservationError):
    """Raised by the service layer when an id is absent from its registry."""

    def __init__(self, entity_type: str, entity_id: int) -> None:
        super().__init__(f"{entity_type} not found: id={entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class AllocationRuleError(ConservationError):
    """Base for business-rule rejections produced by the validators."""


class CapacityExceededError(AllocationRuleError):
    """Raised when a cage has no free space left."""


class IncompatibleOccupantsError(AllocationRuleError):
    """Raised when an animal may not share a cage with its current occupants."""


class MaxCagesExceededError(AllocationRuleError):
    """Raised when a keeper already looks after the maximum number of cages."""


class DuplicateAssignmentError(AllocationRuleError):
    """Raised when an animal is already housed in a different cage."""


class NotAllocatedError(AllocationRuleError):
    """Raised when a deallocation targets a relationship that does not exist."""


class KeeperUnderloadError(AllocationRuleError):
    """Raised when releasing a cage would leave a keeper below the minimum."""
