from fastapi import HTTPException
from family_graph.db.memory import memory
from family_graph.models.person_model import PersonEdit
from family_graph.services.person_service import check_edit
from family_graph.utils.deps import get_person_or_404


async def add_parent_of(family_id: int, parent_id: int, child_id: int):
    db = memory.db
    async with db.lock:
        child = get_person_or_404(family_id, child_id)
        if parent_id in (child.parent, child.parent2):
            return child.model_dump()

        # Fill the first free parent slot
        if not child.parent:
            parent, parent2 = parent_id, child.parent2
        elif not child.parent2:
            parent, parent2 = child.parent, parent_id
        else:
            raise HTTPException(status_code=400, detail="Child already has two parents")

        edit = PersonEdit(
            id=child_id, familyId=family_id,
            parent=parent, parent2=parent2, spouse=child.spouse,
        )
        check_edit(edit)
        db.replace_person(child_id, {"parent": edit.parent, "parent2": edit.parent2})
        return db.person(child_id).model_dump()


async def remove_parent_of(family_id: int, parent_id: int, child_id: int):
    db = memory.db
    async with db.lock:
        child = get_person_or_404(family_id, child_id)
        patch = {}
        if child.parent == parent_id:
            patch["parent"] = 0
        if child.parent2 == parent_id:
            patch["parent2"] = 0
        if patch:
            db.replace_person(child_id, patch)
        return db.person(child_id).model_dump()
