from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from family_graph.models.person_model import PersonOut
from family_graph.utils.deps import get_family_or_404
from family_graph.services.relationship_service import add_parent_of, remove_parent_of

router = APIRouter(prefix="/api/v1/families/{familyId}/relationships", tags=["Relationships"])

class ParentOfIn(BaseModel):
    parentId: int = Field(gt=0)
    childId: int = Field(gt=0)

@router.post("/parent-of", response_model=PersonOut)
async def create_parent_of(familyId: int, body: ParentOfIn, _=Depends(get_family_or_404)):
    return await add_parent_of(familyId, body.parentId, body.childId)

@router.delete("/parent-of", response_model=PersonOut)
async def delete_parent_of(familyId: int, body: ParentOfIn, _=Depends(get_family_or_404)):
    return await remove_parent_of(familyId, body.parentId, body.childId)
