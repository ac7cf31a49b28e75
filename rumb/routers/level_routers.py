# import moduls/libraries
from fastapi import APIRouter, Depends, Query, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

# import form project
from rumb.core.database import get_db
from rumb.engine.calendar import is_week_key, normalize_day_key
from rumb.schemas import LevelRead, LevelType
from rumb.services import LevelServices


router = APIRouter()


# get a list of levels (GET)
@router.get("/", response_model=List[LevelRead])
async def get_levels(
    db: Session = Depends(get_db),
    level_type: Optional[LevelType] = Query(None, description="Filter by daily or weekly"),
    difficulty_id: Optional[str] = Query(None, description="Filter by difficulty"),
    order: Optional[str] = Query("desc", description="Sort order"),
    limit: int = Query(100, ge=1, le=1000),
):
    """Get a list of levels, newest first"""
    services = LevelServices(db)
    return services.get_all_levels(level_type, difficulty_id, order, limit)


@router.get("/daily/{day}", response_model=LevelRead)
async def get_daily_level(day: str, db: Session = Depends(get_db)):
    """Fetch the level of one day (YYYY-MM-DD)"""
    key = normalize_day_key(day)
    if not key:
        raise HTTPException(status_code=422, detail=f"Invalid date: {day}")
    services = LevelServices(db)
    return services.get_daily_level(key)


@router.get("/weekly/{week}", response_model=LevelRead)
async def get_weekly_level(week: str, db: Session = Depends(get_db)):
    """Fetch the level of one ISO week (YYYY-Www)"""
    if not is_week_key(week):
        raise HTTPException(status_code=422, detail=f"Invalid week key: {week}")
    services = LevelServices(db)
    return services.get_weekly_level(week)


# Get level by id
@router.get("/{level_id}", response_model=LevelRead)
async def get_level(level_id: UUID, db: Session = Depends(get_db)):
    """Fetch one level by ID"""
    services = LevelServices(db)
    return services.get_level_by_id(level_id)
