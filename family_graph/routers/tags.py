from fastapi import APIRouter, Depends
from family_graph.models.common import APIMessage
from family_graph.models.tag import TagCreate, TagLinkOut, TagOut
from family_graph.utils.deps import get_family_or_404
from family_graph.services.tag_service import create_tag, delete_tag, list_tag_links, list_tags

router = APIRouter(prefix="/api/v1/families/{familyId}", tags=["Tags"])

@router.post("/tags", response_model=TagOut, status_code=201)
async def create_tag_route(familyId: int, body: TagCreate, _=Depends(get_family_or_404)):
    return await create_tag(familyId, body.name)

@router.get("/tags", response_model=list[TagOut])
async def list_tags_route(familyId: int, _=Depends(get_family_or_404)):
    return await list_tags(familyId)

@router.delete("/tags/{tagId}", response_model=APIMessage)
async def delete_tag_route(familyId: int, tagId: int, _=Depends(get_family_or_404)):
    await delete_tag(familyId, tagId)
    return {"message": "Tag deleted"}

@router.get("/tag-links", response_model=list[TagLinkOut])
async def list_tag_links_route(familyId: int, _=Depends(get_family_or_404)):
    return await list_tag_links(familyId)
