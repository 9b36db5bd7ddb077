from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, JSON
from database import Base


class Milestone(Base):
    __tablename__ = "milestones"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    sequence_order = Column(Integer, nullable=False)  # week number when created from a template
    target_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="not_started")  # not_started/in_progress/completed/skipped
    progress_percentage = Column(Integer, nullable=False, default=0)
    completed_date = Column(DateTime, nullable=True)
    completion_criteria = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
