"""Deterministic generation and x/y placement for a materialized family view.

The layout works in four passes over the visible persons:

1. couples are detected from symmetric ``spouse`` pairs;
2. every person gets a generation so that children sit strictly below their
   parents and spouses share a layer;
3. couples and singletons become clusters, clusters are grouped by shared
   parentage and groups are centered under their parents, then swept left to
   right so that no two groups in a layer overlap;
4. the whole picture is shifted so that nothing sits closer than a margin to
   the origin.

Branch keys (a surname lineage per person) are computed alongside for
coloring; they do not influence positions.
"""

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import NamedTuple

from pydantic import BaseModel

from family_graph.core.config import settings
from family_graph.models.person_model import Person
from family_graph.services.graph_index import index_by_id

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class LayoutConfig(BaseModel):
    node_width: float = 190
    node_height: float = 72
    spouse_gap: float = 60
    cluster_gap: float = 40
    group_gap: float = 60
    layer_gap: float = 120
    margin: float = 40

    @classmethod
    def from_settings(cls) -> "LayoutConfig":
        return cls(
            node_width=settings.TREE_NODE_WIDTH,
            node_height=settings.TREE_NODE_HEIGHT,
            spouse_gap=settings.TREE_SPOUSE_GAP,
            cluster_gap=settings.TREE_CLUSTER_GAP,
            group_gap=settings.TREE_GROUP_GAP,
            layer_gap=settings.TREE_LAYER_GAP,
            margin=settings.TREE_MARGIN,
        )


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class Couple:
    id: str
    a: int
    b: int


@dataclass
class Cluster:
    id: str
    members: list[int]
    width: float
    generation: int


@dataclass
class GenerationResult:
    generations: dict[int, int]
    converged: bool
    iterations: int


@dataclass
class _Group:
    key: tuple
    parent_ids: list[int]
    clusters: list[Cluster] = field(default_factory=list)
    width: float = 0.0
    center_x: float = 0.0


@dataclass
class LayoutResult:
    positions: dict[int, Point]
    generations: dict[int, int]
    couples: dict[str, Couple]
    clusters: list[Cluster]
    converged: bool
    branch_keys: dict[int, str]
    colors: dict[str, dict[str, str]]

    def junction(self, a: int, b: int) -> Point | None:
        """Midpoint between two positioned persons, where a shared child edge starts."""
        pa, pb = self.positions.get(a), self.positions.get(b)
        if pa is None or pb is None:
            return None
        return Point((pa.x + pb.x) / 2, (pa.y + pb.y) / 2)

    def color_of(self, person_id: int) -> dict[str, str] | None:
        key = self.branch_keys.get(person_id)
        return self.colors.get(key) if key is not None else None


def couple_id(a: int, b: int) -> str:
    return f"{min(a, b)}-{max(a, b)}"


def in_set_parents(person: Person, keys) -> list[int]:
    parents = []
    if person.parent and person.parent in keys:
        parents.append(person.parent)
    if person.parent2 and person.parent2 in keys and person.parent2 != person.parent:
        parents.append(person.parent2)
    return parents


def find_couples(people: Sequence[Person]) -> dict[str, Couple]:
    by_id = index_by_id(people)
    couples: dict[str, Couple] = {}
    for person in people:
        spouse = by_id.get(person.spouse) if person.spouse else None
        if spouse is None or spouse.id == person.id or spouse.spouse != person.id:
            continue
        cid = couple_id(person.id, spouse.id)
        if cid not in couples:
            couples[cid] = Couple(cid, min(person.id, spouse.id), max(person.id, spouse.id))
    return couples


def compute_generations(people: Sequence[Person], couples: dict[str, Couple]) -> GenerationResult:
    """Fixed-point generation assignment, bounded for acyclic input.

    A cyclic parent graph never settles; that shows up as ``converged=False``
    rather than as an error.
    """
    keys = {p.id for p in people}
    gen = {p.id: 0 for p in people}
    max_iterations = max(len(people) * 4, 10)

    for iteration in range(1, max_iterations + 1):
        changed = False

        for person in people:
            parents = in_set_parents(person, keys)
            if not parents:
                continue
            next_gen = max(gen[pid] for pid in parents) + 1
            if next_gen > gen[person.id]:
                gen[person.id] = next_gen
                changed = True

        for couple in couples.values():
            shared = max(gen[couple.a], gen[couple.b])
            for member in (couple.a, couple.b):
                if shared > gen[member]:
                    gen[member] = shared
                    changed = True

        if not changed:
            return GenerationResult(gen, True, iteration)

    return GenerationResult(gen, False, max_iterations)


def build_clusters(
    people: Sequence[Person],
    couples: dict[str, Couple],
    generations: dict[int, int],
    config: LayoutConfig,
) -> list[Cluster]:
    clusters: list[Cluster] = []
    clustered: set[int] = set()

    for couple in couples.values():
        clusters.append(Cluster(
            id=f"couple-{couple.id}",
            members=[couple.a, couple.b],
            width=config.node_width * 2 + config.spouse_gap,
            generation=max(generations.get(couple.a, 0), generations.get(couple.b, 0)),
        ))
        clustered.update((couple.a, couple.b))

    for person in people:
        if person.id in clustered:
            continue
        clustered.add(person.id)
        clusters.append(Cluster(
            id=f"single-{person.id}",
            members=[person.id],
            width=config.node_width,
            generation=generations.get(person.id, 0),
        ))

    return clusters


def parse_year(value: str | None) -> int | None:
    """Leading integer of a free-form year string ("1923?" -> 1923, "abt 1923" -> None)."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _cluster_order(by_id: dict[int, Person]):
    def compare(a: Cluster, b: Cluster) -> int:
        person_a = by_id.get(a.members[0])
        person_b = by_id.get(b.members[0])
        year_a = parse_year(person_a.birthYear if person_a else None)
        year_b = parse_year(person_b.birthYear if person_b else None)
        if year_a is not None and year_b is not None:
            return year_a - year_b
        name_a = (person_a.name if person_a else "").casefold()
        name_b = (person_b.name if person_b else "").casefold()
        return (name_a > name_b) - (name_a < name_b)

    return cmp_to_key(compare)


def _group_clusters(clusters, by_id, keys) -> list[_Group]:
    groups: dict[tuple, _Group] = {}
    for cluster in clusters:
        parent_ids: set[int] = set()
        for member in cluster.members:
            person = by_id.get(member)
            if person is not None:
                parent_ids.update(in_set_parents(person, keys))
        parent_list = sorted(parent_ids)
        key = tuple(parent_list) if parent_list else ("root", cluster.id)
        group = groups.get(key)
        if group is None:
            group = groups[key] = _Group(key=key, parent_ids=parent_list)
        group.clusters.append(cluster)
    return list(groups.values())


def compute_positions(
    people: Sequence[Person],
    clusters: list[Cluster],
    config: LayoutConfig,
) -> dict[int, Point]:
    keys = {p.id for p in people}
    by_id = index_by_id(people)
    order = _cluster_order(by_id)

    clusters_by_gen: dict[int, list[Cluster]] = {}
    for cluster in clusters:
        clusters_by_gen.setdefault(cluster.generation, []).append(cluster)

    positions: dict[int, Point] = {}
    for gen_level in sorted(clusters_by_gen):
        y = gen_level * (config.node_height + config.layer_gap)
        root_cursor = 0.0

        groups = _group_clusters(clusters_by_gen[gen_level], by_id, keys)
        for group in groups:
            group.width = (
                sum(c.width for c in group.clusters)
                + max(len(group.clusters) - 1, 0) * config.cluster_gap
            )
            parent_x = [positions[pid].x for pid in group.parent_ids if pid in positions]
            if parent_x:
                group.center_x = sum(parent_x) / len(parent_x)
            else:
                group.center_x = root_cursor + group.width / 2
                root_cursor += group.width + config.group_gap

        groups.sort(key=lambda g: g.center_x)

        cursor_right = -math.inf
        for group in groups:
            left = group.center_x - group.width / 2
            if left < cursor_right + config.group_gap:
                group.center_x = cursor_right + config.group_gap + group.width / 2
            cursor_right = group.center_x + group.width / 2

        for group in groups:
            x_cursor = group.center_x - group.width / 2
            for cluster in sorted(group.clusters, key=order):
                center = x_cursor + cluster.width / 2
                if len(cluster.members) == 2:
                    offset = (config.node_width + config.spouse_gap) / 2
                    positions[cluster.members[0]] = Point(center - offset, y)
                    positions[cluster.members[1]] = Point(center + offset, y)
                else:
                    positions[cluster.members[0]] = Point(center, y)
                x_cursor += cluster.width + config.cluster_gap

    return normalize_positions(positions, config)


def normalize_positions(positions: dict[int, Point], config: LayoutConfig) -> dict[int, Point]:
    """Shift everything right/down so every node's extent starts at or past the margin."""
    if not positions:
        return positions
    min_x = min(p.x - config.node_width / 2 for p in positions.values())
    min_y = min(p.y - config.node_height / 2 for p in positions.values())
    offset_x = config.margin - min_x if min_x < config.margin else 0
    offset_y = config.margin - min_y if min_y < config.margin else 0
    return {pid: Point(p.x + offset_x, p.y + offset_y) for pid, p in positions.items()}


def surname_of(name: str) -> str:
    parts = (name or "").split()
    return parts[-1] if len(parts) > 1 else ""


def compute_branch_keys(people: Sequence[Person]) -> dict[int, str]:
    """Surname lineage per person, inherited up the parent chain when a name has no surname."""
    by_id = index_by_id(people)
    keys: dict[int, str] = {}

    for person in people:
        if person.id in keys:
            continue
        path: list[int] = []
        seen: set[int] = set()
        current = person
        while True:
            if current.id in keys:
                key = keys[current.id]
                break
            path.append(current.id)
            seen.add(current.id)
            surname = surname_of(current.name)
            if surname:
                key = surname.lower()
                break
            parent = by_id.get(current.parent)
            if parent is None:
                parent = by_id.get(current.parent2)
            if parent is None or parent.id in seen:
                key = f"root-{current.id}"
                break
            current = parent
        for pid in path:
            keys[pid] = key

    return keys


def branch_colors(branch_keys: dict[int, str]) -> dict[str, dict[str, str]]:
    ordered = sorted(set(branch_keys.values()))
    count = max(len(ordered), 1)
    colors = {}
    for index, key in enumerate(ordered):
        hue = math.floor(index * 360 / count + 0.5)
        colors[key] = {
            "cardStroke": f"hsl({hue}, 70%, 42%)",
            "cardFill": f"hsla({hue}, 70%, 88%, 0.35)",
        }
    return colors


def compute_layout(people: Sequence[Person], config: LayoutConfig | None = None) -> LayoutResult:
    config = config or LayoutConfig.from_settings()
    couples = find_couples(people)
    result = compute_generations(people, couples)
    if not result.converged:
        logger.warning(
            "Generation assignment did not converge after %d passes over %d people; "
            "the parent graph is probably cyclic",
            result.iterations,
            len(people),
        )
    clusters = build_clusters(people, couples, result.generations, config)
    positions = compute_positions(people, clusters, config)
    branch_keys = compute_branch_keys(people)
    return LayoutResult(
        positions=positions,
        generations=result.generations,
        couples=couples,
        clusters=clusters,
        converged=result.converged,
        branch_keys=branch_keys,
        colors=branch_colors(branch_keys),
    )
