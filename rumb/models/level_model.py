from sqlalchemy import Column, String, JSON, DateTime, Uuid, func, Index
from sqlalchemy.orm import relationship
from rumb.core.database import Base
from uuid import uuid4


class Level(Base):
    __tablename__ = "levels"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    level_type = Column(String, nullable=False)  # 'daily' or 'weekly'
    date = Column(String)  # YYYY-MM-DD, daily levels only
    week_key = Column(String)  # YYYY-Www, weekly levels only
    difficulty_id = Column(String, nullable=False)
    rule_id = Column(String)
    start_id = Column(String, nullable=False)
    target_id = Column(String, nullable=False)
    shortest_path = Column(JSON, nullable=False)
    avoid_ids = Column(JSON)
    must_pass_ids = Column(JSON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    calendar_day = relationship("CalendarDaily", back_populates="level", uselist=False)
    calendar_week = relationship("CalendarWeekly", back_populates="level", uselist=False)

    __table_args__ = (
        Index("ix_levels_cadence", "level_type", "date", "week_key", "difficulty_id"),
    )
