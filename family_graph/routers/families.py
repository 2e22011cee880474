from fastapi import APIRouter, Depends
from family_graph.models.common import APIMessage
from family_graph.models.family import FamilyCreate, FamilyOut
from family_graph.utils.deps import get_family_or_404
from family_graph.services.family_service import create_family, delete_family, list_families
from family_graph.services.transfer_service import export_family

router = APIRouter(prefix="/api/v1/families", tags=["Families"])

@router.post("", response_model=FamilyOut, status_code=201)
async def create_family_route(data: FamilyCreate):
    return await create_family(data.name, data.notes)

@router.get("", response_model=list[FamilyOut])
async def list_families_route():
    return await list_families()

@router.get("/{familyId}", response_model=FamilyOut)
async def get_family_route(family=Depends(get_family_or_404)):
    return family

@router.delete("/{familyId}", response_model=APIMessage)
async def delete_family_route(familyId: int):
    await delete_family(familyId)
    return {"message": "Family deleted"}

@router.get("/{familyId}/export")
async def export_family_route(familyId: int):
    return await export_family(familyId)
