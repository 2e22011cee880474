"""Selection of the persons a view materializes around a focus person."""

from collections import deque
from collections.abc import Collection, Sequence
from enum import Enum

from family_graph.models.person_model import Person
from family_graph.services.graph_index import build_child_index, index_by_id, parents_of


class ExpandMode(str, Enum):
    ANCESTORS = "ancestors"
    DESCENDANTS = "descendants"
    BOTH = "both"
    ALL = "all"


def tag_closure(people: Sequence[Person], tagged_ids: Collection[int]) -> list[Person]:
    """Tagged persons plus their parents, spouse and direct children.

    An empty tag match yields an empty list, whatever view is requested later.
    """
    if not tagged_ids:
        return []
    by_id = index_by_id(people)
    children = build_child_index(people)
    include = set(tagged_ids)
    for pid in tagged_ids:
        person = by_id.get(pid)
        if person is None:
            continue
        include.update(parents_of(person))
        if person.spouse:
            include.add(person.spouse)
        include.update(children.get(pid, ()))
    return [p for p in people if p.id in include]


def _walk(start: int, max_depth: int, step, included: set[int]) -> None:
    queue = deque([(start, 0)])
    while queue:
        current, depth = queue.popleft()
        if depth >= max_depth:
            continue
        for nxt in step(current):
            if nxt not in included:
                included.add(nxt)
                queue.append((nxt, depth + 1))


def get_visible_people(
    people: Sequence[Person],
    focus_id: int | None,
    mode: ExpandMode | str,
    max_depth: int,
    include_set: Collection[int] | None = None,
) -> list[Person]:
    """Narrow ``people`` to what a view centered on ``focus_id`` shows.

    ``include_set`` holds tagged person ids when a tag filter is active
    (``None`` when it is not). The result keeps the input order.
    """
    candidates = list(people) if include_set is None else tag_closure(people, include_set)
    try:
        mode = ExpandMode(mode)
    except ValueError:
        mode = ExpandMode.ALL
    if not candidates or mode is ExpandMode.ALL or not focus_id:
        return candidates

    by_id = index_by_id(candidates)
    children = build_child_index(candidates)

    def parents_step(pid: int) -> list[int]:
        person = by_id.get(pid)
        return parents_of(person) if person else []

    def children_step(pid: int) -> list[int]:
        return children.get(pid, [])

    included = {focus_id}
    if mode in (ExpandMode.ANCESTORS, ExpandMode.BOTH):
        _walk(focus_id, max_depth, parents_step, included)
    if mode in (ExpandMode.DESCENDANTS, ExpandMode.BOTH):
        _walk(focus_id, max_depth, children_step, included)

    focus = by_id.get(focus_id)
    if focus is not None:
        for parent_id in parents_of(focus):
            included.update(children.get(parent_id, ()))

    for pid in list(included):
        person = by_id.get(pid)
        if person is not None and person.spouse:
            included.add(person.spouse)

    return [p for p in candidates if p.id in included]
