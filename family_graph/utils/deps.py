from fastapi import HTTPException
from family_graph.db.memory import memory

async def get_family_or_404(familyId: int):
    family = memory.db.family(familyId)
    if not family:
        raise HTTPException(status_code=404, detail="Family not found")
    return family

def get_person_or_404(family_id: int, person_id: int):
    person = memory.db.person(person_id, family_id)
    if person is None:
        raise HTTPException(status_code=404, detail="Person not found")
    return person

def get_tag_or_404(family_id: int, tag_id: int):
    tag = memory.db.tags.get(tag_id)
    if not tag or tag["familyId"] != family_id:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag
