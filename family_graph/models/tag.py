from pydantic import BaseModel, Field

class TagCreate(BaseModel):
    name: str = Field(min_length=1)

class TagOut(BaseModel):
    id: int
    familyId: int
    name: str

class TagLinkOut(BaseModel):
    tagId: int
    personId: int

class PersonTagsIn(BaseModel):
    tagIds: list[int] = []
