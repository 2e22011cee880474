"""Render pipeline: tag filter, visibility, layout, then the node/link model."""

from collections.abc import Collection, Sequence
from fastapi import HTTPException
from family_graph.db.memory import memory
from family_graph.models.person_model import Person
from family_graph.models.tree import ViewParams
from family_graph.services.layout import LayoutConfig, LayoutResult, compute_layout, couple_id
from family_graph.services.tag_service import tagged_person_ids
from family_graph.services.visibility import get_visible_people


def build_model_data(people: Sequence[Person], layout: LayoutResult) -> dict:
    """Turn a laid-out person list into the node/link model the renderer draws.

    A child of two visible parents hangs from their marriage node; a child of
    one visible parent hangs from that parent.
    """
    nodes: list[dict] = []
    links: list[dict] = []
    marriages: dict[str, dict] = {}
    by_id = {p.id: p for p in people}

    for person in people:
        data = person.model_dump()
        pos = layout.positions.get(person.id)
        data.update(
            key=person.id,
            generation=layout.generations.get(person.id, 0),
            x=pos.x if pos else None,
            y=pos.y if pos else None,
            branch=layout.branch_keys.get(person.id),
        )
        colors = layout.color_of(person.id)
        if colors:
            data.update(colors)
        nodes.append(data)

    def divorce_status(a: int, b: int) -> bool:
        pa, pb = by_id.get(a), by_id.get(b)
        if pa is None or pb is None:
            return False
        if pa.spouse != b and pb.spouse != a:
            return False
        return bool(pa.divorced or pb.divorced)

    def ensure_marriage(a: int, b: int) -> str:
        cid = couple_id(a, b)
        entry = marriages.get(cid)
        if entry is None:
            lo, hi = min(a, b), max(a, b)
            spouse_link = {"from": lo, "to": hi, "category": "Spouse", "isDivorced": divorce_status(lo, hi)}
            junction = layout.junction(lo, hi)
            entry = marriages[cid] = {"key": f"m-{cid}", "link": spouse_link}
            nodes.append({
                "key": entry["key"],
                "category": "Marriage",
                "spouses": [lo, hi],
                "x": junction.x if junction else None,
                "y": junction.y if junction else None,
            })
            links.append(spouse_link)
        return entry["key"]

    for couple in layout.couples.values():
        ensure_marriage(couple.a, couple.b)

    for person in people:
        parent1, parent2 = person.parent, person.parent2
        if parent1 and parent2 and parent1 in by_id and parent2 in by_id:
            links.append({"from": ensure_marriage(parent1, parent2), "to": person.id, "category": "ParentChild"})
        elif parent1 and parent1 in by_id:
            links.append({"from": parent1, "to": person.id, "category": "ParentChild"})
        elif parent2 and parent2 in by_id:
            links.append({"from": parent2, "to": person.id, "category": "ParentChild"})

    return {"nodes": nodes, "links": links, "converged": layout.converged}


def build_tree(
    people: Sequence[Person],
    focus_id: int | None,
    mode: str,
    max_depth: int,
    tagged_ids: Collection[int] | None = None,
    config: LayoutConfig | None = None,
) -> dict:
    visible = get_visible_people(people, focus_id, mode, max_depth, tagged_ids)
    if not visible:
        return {"nodes": [], "links": [], "converged": True}
    return build_model_data(visible, compute_layout(visible, config))


async def get_tree(family_id: int, params: ViewParams) -> dict:
    people = memory.db.people(family_id)
    if people is None:
        raise HTTPException(status_code=404, detail="Family not found")
    tagged = tagged_person_ids(family_id, params.tagId) if params.tagId else None
    return build_tree(people, params.focusId, params.mode, params.maxDepth, tagged)
