from typing import Annotated
from fastapi import APIRouter, Depends, Query
from family_graph.models.tree import TreeOut, ViewParams
from family_graph.utils.deps import get_family_or_404
from family_graph.services.tree_service import get_tree

router = APIRouter(prefix="/api/v1/families/{familyId}/tree", tags=["Tree"])

@router.get("", response_model=TreeOut)
async def get_tree_route(familyId: int, params: Annotated[ViewParams, Query()], _=Depends(get_family_or_404)):
    # {"nodes": [...], "links": [...]} positioned for the renderer
    return await get_tree(familyId, params)
