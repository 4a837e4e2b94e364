from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class HistoryRecord(BaseModel):
    id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    action: str
    details: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True

class HistoryPage(BaseModel):
    records: List[HistoryRecord]
    total: int
    limit: int
    offset: int
