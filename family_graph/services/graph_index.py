"""Adjacency views over a flat person list."""

from collections.abc import Iterable, Mapping

from family_graph.models.person_model import Person

ParentPair = tuple[int, int]


def build_child_index(
    people: Iterable[Person],
    overrides: Mapping[int, ParentPair] | None = None,
) -> dict[int, list[int]]:
    """Map each parent id to the ids of persons listing it as ``parent`` or ``parent2``.

    ``overrides`` substitutes a person's ``(parent, parent2)`` pair with a value
    that has not been committed yet. A child appears once per role, in
    insertion order. No cycle detection happens here.
    """
    children: dict[int, list[int]] = {}
    for p in people:
        if overrides and p.id in overrides:
            parent, parent2 = overrides[p.id]
        else:
            parent, parent2 = p.parent, p.parent2
        if parent:
            children.setdefault(parent, []).append(p.id)
        if parent2:
            children.setdefault(parent2, []).append(p.id)
    return children


def index_by_id(people: Iterable[Person]) -> dict[int, Person]:
    return {p.id: p for p in people}


def parents_of(person: Person) -> list[int]:
    return [pid for pid in (person.parent, person.parent2) if pid]
