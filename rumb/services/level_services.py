import logging
from typing import List, Optional

from fastapi import HTTPException

from rumb import models
from rumb.schemas import LevelType

logger = logging.getLogger(__name__)


class LevelServices:
    """ Read side of the published levels"""

    def __init__(self, db):
        self.db = db

    # get all levels
    def get_all_levels(
            self,
            level_type: Optional[LevelType] = None,
            difficulty_id: Optional[str] = None,
            order: Optional[str] = "desc",  # newest first by default
            limit: int = 100,
    ) -> List[models.Level]:
        """Fetch levels with filter"""
        query = self.db.query(models.Level)

        if level_type:
            query = query.filter(models.Level.level_type == LevelType(level_type).value)
        if difficulty_id:
            query = query.filter(models.Level.difficulty_id == difficulty_id)

        sort_column = models.Level.created_at
        query = query.order_by(sort_column.asc() if order == "asc" else sort_column.desc())
        return query.limit(limit).all()

    # get one level by id
    def get_level_by_id(self, level_id):
        level = self.db.query(models.Level).filter(models.Level.id == level_id).first()
        if not level:
            raise HTTPException(status_code=404, detail="Level not found")
        return level

    def get_daily_level(self, day_key: str):
        """Fetch the level published for one day"""
        row = self.db.query(models.CalendarDaily).filter(models.CalendarDaily.date == day_key).first()
        if not row:
            logger.info("No daily level for %s", day_key)
            raise HTTPException(status_code=404, detail=f"No daily level for {day_key}")
        return row.level

    def get_weekly_level(self, week_key: str):
        """Fetch the level published for one ISO week"""
        row = self.db.query(models.CalendarWeekly).filter(models.CalendarWeekly.week_key == week_key).first()
        if not row:
            logger.info("No weekly level for %s", week_key)
            raise HTTPException(status_code=404, detail=f"No weekly level for {week_key}")
        return row.level
