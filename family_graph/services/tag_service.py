from fastapi import HTTPException
from family_graph.db.memory import memory
from family_graph.utils.deps import get_person_or_404, get_tag_or_404


async def create_tag(family_id: int, name: str) -> dict:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Tag name is required")
    async with memory.db.lock:
        if any(t["name"].lower() == name.lower() for t in memory.db.family_tags(family_id)):
            raise HTTPException(status_code=409, detail="Tag already exists")
        return memory.db.add_tag(family_id, name)


async def list_tags(family_id: int) -> list[dict]:
    return sorted(memory.db.family_tags(family_id), key=lambda t: t["name"].lower())


async def delete_tag(family_id: int, tag_id: int) -> bool:
    async with memory.db.lock:
        get_tag_or_404(family_id, tag_id)
        memory.db.remove_tag(tag_id)
    return True


async def set_person_tags(family_id: int, person_id: int, tag_ids: list[int]) -> list[dict]:
    async with memory.db.lock:
        get_person_or_404(family_id, person_id)
        for tid in tag_ids:
            get_tag_or_404(family_id, tid)
        memory.db.set_person_tags(person_id, tag_ids)
        return [link for link in memory.db.family_tag_links(family_id) if link["personId"] == person_id]


async def list_tag_links(family_id: int) -> list[dict]:
    return memory.db.family_tag_links(family_id)


def tagged_person_ids(family_id: int, tag_id: int) -> set[int]:
    get_tag_or_404(family_id, tag_id)
    return memory.db.tagged_person_ids(tag_id)
