import logging
from fastapi import HTTPException
from family_graph.db.memory import memory

logger = logging.getLogger(__name__)


async def create_family(name: str, notes: str | None = None) -> dict:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    async with memory.db.lock:
        doc = memory.db.add_family(name, notes or "")
    logger.info("Created family %s (%s)", doc["id"], doc["name"])
    return doc


async def list_families() -> list[dict]:
    return sorted(memory.db.families.values(), key=lambda f: f["id"], reverse=True)


async def delete_family(family_id: int) -> bool:
    async with memory.db.lock:
        removed = memory.db.remove_family(family_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Family not found")
    logger.info("Deleted family %s", family_id)
    return True
