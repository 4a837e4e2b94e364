from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class CompetitionCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    status: str = "upcoming"

class Competition(CompetitionCreate):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CompetitionItemCreate(BaseModel):
    item_id: int
    quantity: int = Field(ge=1)

class CompetitionItem(BaseModel):
    id: int
    competition_id: int
    item_id: int
    quantity: int
    item_name: Optional[str] = None

    class Config:
        from_attributes = True
