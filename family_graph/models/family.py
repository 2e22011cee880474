from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class FamilyCreate(BaseModel):
    name: str = Field(min_length=1)
    notes: Optional[str] = ""

class FamilyOut(BaseModel):
    id: int
    name: str
    notes: str = ""
    createdAt: datetime
