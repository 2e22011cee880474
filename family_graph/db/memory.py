import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone

from family_graph.models.person_model import Person

logger = logging.getLogger(__name__)

PERSON_FIELDS = (
    "name", "gender", "birthYear", "deathYear", "photo", "bio",
    "parent", "parent2", "isPinned", "pinColor",
)

def now():
    return datetime.now(timezone.utc)

class FamilyStore:
    """Process-local store for families, persons, spousal unions and tags.

    Spouses are not stored on person rows: each couple is one union record and
    a person points at most at one union, so both sides always agree.
    Ids come from per-kind counters and are never reused.
    """

    def __init__(self):
        self.lock = asyncio.Lock()
        self.families: dict[int, dict] = {}
        self.persons: dict[int, dict] = {}
        self.unions: dict[int, dict] = {}
        self.tags: dict[int, dict] = {}
        self.tag_links: list[dict] = []
        self._counters: defaultdict[str, int] = defaultdict(int)

    def next_id(self, kind: str) -> int:
        self._counters[kind] += 1
        return self._counters[kind]

    # Families

    def add_family(self, name: str, notes: str = "") -> dict:
        fid = self.next_id("family")
        doc = {"id": fid, "name": name, "notes": notes or "", "createdAt": now()}
        self.families[fid] = doc
        return doc

    def family(self, family_id: int) -> dict | None:
        return self.families.get(family_id)

    def remove_family(self, family_id: int) -> bool:
        if self.families.pop(family_id, None) is None:
            return False
        member_ids = {pid for pid, row in self.persons.items() if row["familyId"] == family_id}
        for pid in member_ids:
            del self.persons[pid]
        self.unions = {uid: u for uid, u in self.unions.items() if u["familyId"] != family_id}
        tag_ids = {tid for tid, t in self.tags.items() if t["familyId"] == family_id}
        for tid in tag_ids:
            del self.tags[tid]
        self.tag_links = [
            link for link in self.tag_links
            if link["tagId"] not in tag_ids and link["personId"] not in member_ids
        ]
        return True

    # Persons

    def _to_person(self, row: dict) -> Person:
        union = self.unions.get(row["unionId"]) if row["unionId"] else None
        spouse, divorced = 0, False
        if union is not None:
            spouse = union["b"] if union["a"] == row["id"] else union["a"]
            divorced = union["divorced"]
        data = {k: v for k, v in row.items() if k != "unionId"}
        return Person(**data, spouse=spouse, divorced=divorced)

    def person(self, person_id: int, family_id: int | None = None) -> Person | None:
        row = self.persons.get(person_id)
        if row is None or (family_id is not None and row["familyId"] != family_id):
            return None
        return self._to_person(row)

    def people(self, family_id: int) -> list[Person] | None:
        """Snapshot of one family ordered by id, or ``None`` if the family does not exist."""
        if family_id not in self.families:
            return None
        rows = sorted(
            (row for row in self.persons.values() if row["familyId"] == family_id),
            key=lambda r: r["id"],
        )
        return [self._to_person(row) for row in rows]

    def insert_person(self, family_id: int, fields: dict) -> int:
        pid = self.next_id("person")
        row = {"id": pid, "familyId": family_id, "unionId": 0}
        row.update({k: fields[k] for k in PERSON_FIELDS if k in fields})
        row.setdefault("parent", 0)
        row.setdefault("parent2", 0)
        self.persons[pid] = row
        return pid

    def replace_person(self, person_id: int, fields: dict) -> None:
        row = self.persons[person_id]
        row.update({k: fields[k] for k in PERSON_FIELDS if k in fields})

    def remove_person(self, person_id: int) -> bool:
        row = self.persons.pop(person_id, None)
        if row is None:
            return False
        self.dissolve(person_id, row)
        for other in self.persons.values():
            if other["parent"] == person_id:
                other["parent"] = 0
            if other["parent2"] == person_id:
                other["parent2"] = 0
        self.tag_links = [link for link in self.tag_links if link["personId"] != person_id]
        return True

    # Spousal unions

    def union_of(self, person_id: int) -> dict | None:
        row = self.persons.get(person_id)
        if row is None or not row["unionId"]:
            return None
        return self.unions.get(row["unionId"])

    def dissolve(self, person_id: int, row: dict | None = None) -> None:
        row = row or self.persons.get(person_id)
        if row is None or not row["unionId"]:
            return
        union = self.unions.pop(row["unionId"], None)
        row["unionId"] = 0
        if union is None:
            return
        other_id = union["b"] if union["a"] == person_id else union["a"]
        other = self.persons.get(other_id)
        if other is not None:
            other["unionId"] = 0

    def set_spouse(self, person_id: int, spouse_id: int, divorced: bool = False) -> None:
        if not spouse_id:
            self.dissolve(person_id)
            return
        current = self.union_of(person_id)
        if current is not None and {current["a"], current["b"]} == {person_id, spouse_id}:
            current["divorced"] = bool(divorced)
            return
        for pid in (person_id, spouse_id):
            previous = self.union_of(pid)
            if previous is not None:
                logger.info("Dissolving union %s-%s", previous["a"], previous["b"])
            self.dissolve(pid)
        uid = self.next_id("union")
        self.unions[uid] = {
            "id": uid,
            "familyId": self.persons[person_id]["familyId"],
            "a": min(person_id, spouse_id),
            "b": max(person_id, spouse_id),
            "divorced": bool(divorced),
        }
        self.persons[person_id]["unionId"] = uid
        self.persons[spouse_id]["unionId"] = uid

    # Tags

    def add_tag(self, family_id: int, name: str) -> dict:
        tid = self.next_id("tag")
        doc = {"id": tid, "familyId": family_id, "name": name}
        self.tags[tid] = doc
        return doc

    def family_tags(self, family_id: int) -> list[dict]:
        return [t for t in self.tags.values() if t["familyId"] == family_id]

    def remove_tag(self, tag_id: int) -> None:
        self.tags.pop(tag_id, None)
        self.tag_links = [link for link in self.tag_links if link["tagId"] != tag_id]

    def set_person_tags(self, person_id: int, tag_ids: list[int]) -> None:
        self.tag_links = [link for link in self.tag_links if link["personId"] != person_id]
        for tid in dict.fromkeys(tag_ids):
            self.tag_links.append({"tagId": tid, "personId": person_id})

    def family_tag_links(self, family_id: int) -> list[dict]:
        return [
            link for link in self.tag_links
            if self.tags.get(link["tagId"], {}).get("familyId") == family_id
        ]

    def tagged_person_ids(self, tag_id: int) -> set[int]:
        return {link["personId"] for link in self.tag_links if link["tagId"] == tag_id}


class Memory:
    db: FamilyStore | None = None

memory = Memory()

async def connect_to_memory():
    memory.db = FamilyStore()
    logger.info("In-memory family store ready")
    return memory.db

async def close_memory():
    memory.db = None
