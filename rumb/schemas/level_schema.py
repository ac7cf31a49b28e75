from pydantic import BaseModel
from typing import Optional, List
from uuid import UUID
from datetime import datetime
from enum import Enum


class LevelType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class LevelRead(BaseModel):
    id: UUID
    level_type: LevelType
    date: Optional[str] = None
    week_key: Optional[str] = None
    difficulty_id: str
    rule_id: Optional[str] = None
    start_id: str
    target_id: str
    shortest_path: List[str]
    avoid_ids: Optional[List[str]] = None
    must_pass_ids: Optional[List[str]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
