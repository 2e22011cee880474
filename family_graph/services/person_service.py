import logging
from fastapi import HTTPException
from family_graph.core.errors import GraphErrorCode, GraphValidationError
from family_graph.db.memory import memory
from family_graph.models.person_model import PersonCreate, PersonEdit
from family_graph.services.validator import ensure_valid

logger = logging.getLogger(__name__)


def _raise_http(exc: GraphValidationError):
    status = 404 if exc.code is GraphErrorCode.GROUP_NOT_FOUND else 400
    raise HTTPException(status_code=status, detail=exc.error.message) from exc


def check_edit(edit: PersonEdit):
    """Run the validator against the current snapshot; caller must hold the store lock."""
    try:
        ensure_valid(edit, memory.db.people(edit.familyId))
    except GraphValidationError as exc:
        _raise_http(exc)


async def list_persons(family_id: int) -> list[dict]:
    people = memory.db.people(family_id)
    if people is None:
        raise HTTPException(status_code=404, detail="Family not found")
    return [p.model_dump() for p in people]


async def create_person(family_id: int, body: PersonCreate) -> dict:
    db = memory.db
    async with db.lock:
        check_edit(PersonEdit(
            id=0, familyId=family_id,
            parent=body.parent, parent2=body.parent2, spouse=body.spouse,
        ))
        person_id = db.insert_person(family_id, body.model_dump())
        db.set_spouse(person_id, body.spouse, body.divorced)
        person = db.person(person_id)
    logger.info("Created person %s in family %s", person_id, family_id)
    return person.model_dump()


async def update_person(family_id: int, person_id: int, body: PersonCreate) -> dict:
    db = memory.db
    async with db.lock:
        if db.family(family_id) is None:
            raise HTTPException(status_code=404, detail="Family not found")
        if db.person(person_id, family_id) is None:
            raise HTTPException(status_code=404, detail="Person not found")
        check_edit(PersonEdit(
            id=person_id, familyId=family_id,
            parent=body.parent, parent2=body.parent2, spouse=body.spouse,
        ))
        db.replace_person(person_id, body.model_dump())
        db.set_spouse(person_id, body.spouse, body.divorced)
        person = db.person(person_id)
    logger.info("Updated person %s in family %s", person_id, family_id)
    return person.model_dump()


async def delete_person(family_id: int, person_id: int) -> bool:
    db = memory.db
    async with db.lock:
        if db.person(person_id, family_id) is None:
            raise HTTPException(status_code=404, detail="Person not found")
        db.remove_person(person_id)
    logger.info("Deleted person %s from family %s", person_id, family_id)
    return True
