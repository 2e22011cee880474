from fastapi import APIRouter, Body, Depends
from family_graph.models.common import APIMessage
from family_graph.models.person_model import PersonCreate, PersonUpdate, PersonOut
from family_graph.models.tag import PersonTagsIn, TagLinkOut
from family_graph.utils.deps import get_family_or_404
from family_graph.services.person_service import create_person, update_person, delete_person, list_persons
from family_graph.services.tag_service import set_person_tags
from family_graph.services.transfer_service import import_payload

router = APIRouter(prefix="/api/v1/families/{familyId}/persons", tags=["Persons"])

@router.post("", response_model=PersonOut, status_code=201)
async def create_person_route(familyId: int, body: PersonCreate):
    return await create_person(familyId, body)

@router.get("", response_model=list[PersonOut])
async def list_persons_route(familyId: int):
    return await list_persons(familyId)

@router.post("/import")
async def import_persons_route(familyId: int, payload: list | dict = Body(...), _=Depends(get_family_or_404)):
    return await import_payload(familyId, payload)

@router.put("/{personId}", response_model=PersonOut)
async def update_person_route(familyId: int, personId: int, body: PersonUpdate):
    return await update_person(familyId, personId, body)

@router.delete("/{personId}", response_model=APIMessage)
async def delete_person_route(familyId: int, personId: int, _=Depends(get_family_or_404)):
    await delete_person(familyId, personId)
    return {"message": "Person deleted"}

@router.put("/{personId}/tags", response_model=list[TagLinkOut])
async def set_person_tags_route(familyId: int, personId: int, body: PersonTagsIn, _=Depends(get_family_or_404)):
    return await set_person_tags(familyId, personId, body.tagIds)
