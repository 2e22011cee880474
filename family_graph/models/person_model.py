from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Literal

Gender = Literal["M", "F"]

REF_FIELDS = ("parent", "parent2", "spouse")

def coerce_ref(value) -> int:
    """Normalize a relational reference to a non-negative int; 0 means none."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        ref = int(value)
    except (TypeError, ValueError):
        return 0
    return ref if ref > 0 else 0

class RelationFields(BaseModel):
    parent: int = 0
    parent2: int = 0
    spouse: int = 0

    @field_validator(*REF_FIELDS, mode="before")
    @classmethod
    def _coerce_refs(cls, v):
        return coerce_ref(v)

class PersonFields(RelationFields):
    """Editable attributes shared by stored persons and incoming edits.

    Loose input (``null``, numeric years) is coerced the way imported files
    and older clients send it.
    """
    gender: Gender = "M"
    birthYear: str = ""
    deathYear: str = ""
    photo: str = ""
    bio: str = ""
    divorced: bool = False
    isPinned: bool = False
    pinColor: str = "#f59e0b"

    @field_validator("birthYear", "deathYear", "photo", "bio", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return "" if v is None else str(v)

    @field_validator("gender", mode="before")
    @classmethod
    def _default_gender(cls, v):
        return v or "M"

    @field_validator("divorced", "isPinned", mode="before")
    @classmethod
    def _none_to_false(cls, v):
        return False if v is None else v

    @field_validator("pinColor", mode="before")
    @classmethod
    def _default_pin_color(cls, v):
        return v or "#f59e0b"

class Person(PersonFields):
    id: int
    familyId: int = 0
    name: str

    @model_validator(mode="after")
    def _divorce_needs_spouse(self):
        if not self.spouse:
            self.divorced = False
        return self

class PersonEdit(RelationFields):
    """Relational part of a create/update, as seen by the validator."""
    id: int = 0
    familyId: int = 0

    @field_validator("id", "familyId", mode="before")
    @classmethod
    def _coerce_ids(cls, v):
        return coerce_ref(v)

class PersonCreate(PersonFields):
    name: str = Field(min_length=1)

    @field_validator("name", mode="before")
    @classmethod
    def _name_to_str(cls, v):
        return v if v is None else str(v)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

class PersonUpdate(PersonCreate):
    pass

class PersonOut(Person):
    pass
