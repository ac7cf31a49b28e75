from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, func
from rumb.core.database import Base


class CronRun(Base):
    """Run ledger. Inserting (run_key, purpose) twice fails, that is the lock between concurrent runners"""
    __tablename__ = "cron_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_key = Column(String, nullable=False)  # cadence key the run was for
    purpose = Column(String, nullable=False)  # 'daily' or 'weekly'
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("run_key", "purpose", name="uq_cron_runs_key_purpose"),)
