from sqlalchemy import Column, Integer, String, DateTime, func
from rumb.core.database import Base


class RuleHistoryEntry(Base):
    __tablename__ = "rule_history"

    id = Column(Integer, primary_key=True, autoincrement=True)  # insertion order
    cadence = Column(String, nullable=False, index=True)  # 'daily' or 'weekly'
    rule_id = Column(String, nullable=False)
    cadence_key = Column(String)  # day or week the rule was issued for
    created_at = Column(DateTime(timezone=True), server_default=func.now())
