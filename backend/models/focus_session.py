from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from database import Base


class FocusSession(Base):
    __tablename__ = "focus_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=True)
    type = Column(String(20), nullable=False)  # pomodoro/deep_work/custom
    duration = Column(Integer, nullable=False)  # planned minutes
    actual_duration = Column(Integer, nullable=True)
    completion_status = Column(String(20), nullable=True)  # completed/abandoned, null while running
    focus_score = Column(Integer, nullable=True)
    distraction_count = Column(Integer, default=0)
    distractions = Column(JSON, nullable=True)  # [{timestamp, description}]
    notes = Column(Text, nullable=True)
    started_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)
