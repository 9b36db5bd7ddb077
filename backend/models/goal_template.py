from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, JSON
from database import Base


class GoalTemplate(Base):
    __tablename__ = "goal_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(50), nullable=False, index=True)
    life_domain = Column(String(20), nullable=False, index=True)
    goal_type = Column(String(20), nullable=False)
    estimated_weeks = Column(Integer, nullable=False)
    difficulty_level = Column(Integer, nullable=False)
    milestones = Column(JSON, nullable=False, default=list)  # [{title, description, week_number}]
    suggested_habits = Column(JSON, nullable=True)  # [{title, frequency, estimated_minutes}]
    icon = Column(String(20), nullable=True)
    color = Column(String(20), nullable=True)
    is_public = Column(Boolean, default=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    usage_count = Column(Integer, nullable=True, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
