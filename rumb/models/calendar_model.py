from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from rumb.core.database import Base


# one row per published day, the primary key makes a second insert for the same day fail
class CalendarDaily(Base):
    __tablename__ = "calendar_daily"

    date = Column(String, primary_key=True)
    level_id = Column(Uuid(as_uuid=True), ForeignKey("levels.id"), nullable=False)

    level = relationship("Level", back_populates="calendar_day")


class CalendarWeekly(Base):
    __tablename__ = "calendar_weekly"

    week_key = Column(String, primary_key=True)
    level_id = Column(Uuid(as_uuid=True), ForeignKey("levels.id"), nullable=False)

    level = relationship("Level", back_populates="calendar_week")
