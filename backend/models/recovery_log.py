from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from database import Base


class RecoveryLog(Base):
    __tablename__ = "recovery_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="in_progress")  # in_progress/completed/abandoned
    trigger_reason = Column(String(20), nullable=False)  # streak_break/long_absence/engagement_drop/user_initiated
    days_inactive = Column(Integer, nullable=False, default=0)
    phase = Column(String(20), nullable=False)
    minimal_routine = Column(JSON, nullable=True)
    adjusted_goals = Column(JSON, nullable=True)
    recovery_streak = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    started_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)
