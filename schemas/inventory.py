from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from models.inventory import TransactionType

class ItemBase(BaseModel):
    name: str = Field(min_length=1)
    category: Optional[str] = None
    description: Optional[str] = None
    cabinet: Optional[str] = None
    quantity: int = Field(ge=0)
    location_x: Optional[float] = None
    location_y: Optional[float] = None

class ItemCreate(ItemBase):
    pass

class ItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    description: Optional[str] = None
    cabinet: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    location_x: Optional[float] = None
    location_y: Optional[float] = None

class Item(ItemBase):
    id: int
    available_quantity: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class StockMovement(BaseModel):
    item_id: int
    quantity: int = Field(gt=0)

class Transaction(BaseModel):
    id: int
    item_id: int
    user_id: int
    type: TransactionType
    quantity: int
    date: datetime
    item_name: Optional[str] = None
    username: Optional[str] = None

    class Config:
        from_attributes = True
