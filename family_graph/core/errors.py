"""Rejection reasons for relational edits.

The validator reports at most one of these per edit; each carries a message
that can be shown to the user as is.
"""

from enum import Enum

from pydantic import BaseModel


class GraphErrorCode(str, Enum):
    SELF_REFERENCE = "self_reference"
    DUPLICATE_PARENT = "duplicate_parent"
    DANGLING_REFERENCE = "dangling_reference"
    CYCLE_DETECTED = "cycle_detected"
    GROUP_NOT_FOUND = "group_not_found"


class GraphError(BaseModel):
    code: GraphErrorCode
    message: str
    field: str | None = None

    def __str__(self) -> str:
        return self.message


class GraphValidationError(Exception):
    """Raised by callers that want a rejected edit to abort their write path."""

    def __init__(self, error: GraphError):
        super().__init__(error.message)
        self.error = error

    @property
    def code(self) -> GraphErrorCode:
        return self.error.code


FIELD_LABELS = {
    "parent": "Parent",
    "parent2": "Second parent",
    "spouse": "Spouse",
}


def self_reference(field: str) -> GraphError:
    return GraphError(
        code=GraphErrorCode.SELF_REFERENCE,
        message=f"{FIELD_LABELS[field]} cannot be the person being edited",
        field=field,
    )


def duplicate_parent() -> GraphError:
    return GraphError(
        code=GraphErrorCode.DUPLICATE_PARENT,
        message="Parent and second parent must be different people",
        field="parent2",
    )


def dangling_reference(field: str, ref_id: int) -> GraphError:
    return GraphError(
        code=GraphErrorCode.DANGLING_REFERENCE,
        message=f"{FIELD_LABELS[field]} (id {ref_id}) does not exist in this family",
        field=field,
    )


def cycle_detected(field: str, ref_id: int) -> GraphError:
    return GraphError(
        code=GraphErrorCode.CYCLE_DETECTED,
        message=f"{FIELD_LABELS[field]} (id {ref_id}) is a descendant of this person; "
                "the edit would create an ancestry cycle",
        field=field,
    )


def group_not_found(family_id: int) -> GraphError:
    return GraphError(
        code=GraphErrorCode.GROUP_NOT_FOUND,
        message=f"Family {family_id} not found",
    )
