"""Family export and import.

Imported files carry their own person ids; they are remapped to fresh store
ids, references that point outside the file are dropped, and every relation
goes through the validator before it is written.
"""

import logging
from fastapi import HTTPException
from pydantic import ValidationError
from family_graph.db.memory import memory
from family_graph.models.person_model import PersonCreate, PersonEdit, coerce_ref
from family_graph.services.validator import validate_edit

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "2"


async def export_family(family_id: int) -> dict:
    db = memory.db
    family = db.family(family_id)
    if family is None:
        raise HTTPException(status_code=404, detail="Family not found")
    return {
        "schemaVersion": SCHEMA_VERSION,
        "family": {"id": family["id"], "name": family["name"], "notes": family["notes"]},
        "people": [p.model_dump() for p in db.people(family_id)],
        "tags": [{"id": t["id"], "name": t["name"]} for t in db.family_tags(family_id)],
        "tagLinks": db.family_tag_links(family_id),
    }


def _insert_records(family_id: int, records: list[dict], warnings: list[str]) -> list[tuple[int, dict]]:
    db = memory.db
    inserted: list[tuple[int, dict]] = []
    for raw in records:
        if not isinstance(raw, dict):
            warnings.append("Skipped a record that is not an object")
            continue
        try:
            body = PersonCreate(**{**raw, "parent": 0, "parent2": 0, "spouse": 0})
        except ValidationError:
            warnings.append(f"Skipped record {raw.get('id')!r}: missing name or invalid fields")
            continue
        new_id = db.insert_person(family_id, body.model_dump())
        inserted.append((new_id, raw))
    return inserted


def _link_records(family_id: int, inserted: list[tuple[int, dict]], id_map: dict[int, int], warnings: list[str]):
    db = memory.db
    for new_id, raw in inserted:
        refs = {field: id_map.get(coerce_ref(raw.get(field)), 0) for field in ("parent", "parent2", "spouse")}
        while True:
            edit = PersonEdit(id=new_id, familyId=family_id, **refs)
            error = validate_edit(edit, db.people(family_id))
            if error is None:
                break
            warnings.append(f"{raw.get('name')}: {error.message}")
            if error.field is None:
                raise HTTPException(status_code=404, detail=error.message)
            refs[error.field] = 0
        db.replace_person(new_id, {"parent": refs["parent"], "parent2": refs["parent2"]})
        if refs["spouse"]:
            db.set_spouse(new_id, refs["spouse"], bool(raw.get("divorced")))


async def import_people(family_id: int, records: list[dict], tags: list[dict] | None = None,
                        tag_links: list[dict] | None = None) -> dict:
    db = memory.db
    warnings: list[str] = []
    async with db.lock:
        if db.family(family_id) is None:
            raise HTTPException(status_code=404, detail="Family not found")
        inserted = _insert_records(family_id, records, warnings)

        id_map: dict[int, int] = {}
        for new_id, raw in inserted:
            old_id = coerce_ref(raw.get("id"))
            if old_id and old_id not in id_map:
                id_map[old_id] = new_id
        _link_records(family_id, inserted, id_map, warnings)

        tag_map: dict[int, int] = {}
        existing = {t["name"].lower(): t["id"] for t in db.family_tags(family_id)}
        for tag in tags or []:
            name = str(tag.get("name") or "").strip()
            if not name:
                continue
            tid = existing.get(name.lower()) or db.add_tag(family_id, name)["id"]
            existing[name.lower()] = tid
            tag_map[coerce_ref(tag.get("id"))] = tid
        for link in tag_links or []:
            tid = tag_map.get(coerce_ref(link.get("tagId")))
            pid = id_map.get(coerce_ref(link.get("personId")))
            if tid and pid:
                db.tag_links.append({"tagId": tid, "personId": pid})

        people = db.people(family_id)

    for warning in warnings:
        logger.warning("Import into family %s: %s", family_id, warning)
    logger.info("Imported %d people into family %s", len(inserted), family_id)
    return {"inserted": len(inserted), "people": [p.model_dump() for p in people], "warnings": warnings}


async def import_payload(family_id: int, payload) -> dict:
    if isinstance(payload, list):
        return await import_people(family_id, payload)
    if isinstance(payload, dict) and str(payload.get("schemaVersion", "")).startswith(SCHEMA_VERSION):
        return await import_people(
            family_id,
            payload.get("people") or [],
            payload.get("tags") or [],
            payload.get("tagLinks") or [],
        )
    raise HTTPException(status_code=400, detail="Unsupported import format")
