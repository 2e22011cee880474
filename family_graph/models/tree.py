from pydantic import BaseModel, Field
from typing import Optional, Literal
from family_graph.core.config import settings

ExpandModeName = Literal["ancestors", "descendants", "both", "all"]

class ViewParams(BaseModel):
    focusId: Optional[int] = None
    mode: ExpandModeName = settings.DEFAULT_EXPAND_MODE
    maxDepth: int = Field(default=settings.DEFAULT_MAX_DEPTH, ge=1, le=settings.MAX_DEPTH_LIMIT)
    tagId: Optional[int] = None

class TreeOut(BaseModel):
    nodes: list[dict]
    links: list[dict]
    converged: bool = True
