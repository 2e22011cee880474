"""Structural checks for edits to a person's parent, second parent and spouse."""

import logging
from collections import deque
from collections.abc import Sequence

from family_graph.core import errors
from family_graph.core.errors import GraphError, GraphValidationError
from family_graph.models.person_model import Person, PersonEdit, REF_FIELDS
from family_graph.services.graph_index import build_child_index

logger = logging.getLogger(__name__)


def validate_edit(edit: PersonEdit, people: Sequence[Person] | None) -> GraphError | None:
    """Return the first rule the edit breaks, or ``None`` if it may be written.

    ``people`` is the edit's family group, or ``None`` when that group does not
    exist. ``edit.id == 0`` means the person is being created.
    """
    for field in REF_FIELDS:
        if edit.id and getattr(edit, field) == edit.id:
            return errors.self_reference(field)

    if edit.parent and edit.parent == edit.parent2:
        return errors.duplicate_parent()

    if people is None:
        return errors.group_not_found(edit.familyId)

    ids = {p.id for p in people}
    for field in REF_FIELDS:
        ref = getattr(edit, field)
        if ref and ref not in ids:
            return errors.dangling_reference(field, ref)

    # A new person has no descendants yet, so it cannot close a cycle.
    if edit.id and (edit.parent or edit.parent2):
        children = build_child_index(people, {edit.id: (edit.parent, edit.parent2)})
        descendants = descendants_of(edit.id, children)
        for field in ("parent", "parent2"):
            ref = getattr(edit, field)
            if ref and ref in descendants:
                return errors.cycle_detected(field, ref)

    return None


def descendants_of(person_id: int, children: dict[int, list[int]]) -> set[int]:
    """Breadth-first reachability over a child index, excluding ``person_id`` itself."""
    seen = {person_id}
    queue = deque([person_id])
    while queue:
        current = queue.popleft()
        for child in children.get(current, ()):
            if child not in seen:
                seen.add(child)
                queue.append(child)
    seen.discard(person_id)
    return seen


def ensure_valid(edit: PersonEdit, people: Sequence[Person] | None) -> None:
    error = validate_edit(edit, people)
    if error is not None:
        logger.warning(
            "Rejected edit of person %s in family %s: %s", edit.id, edit.familyId, error.code.value
        )
        raise GraphValidationError(error)
