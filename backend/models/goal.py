from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Float, ForeignKey, JSON
from database import Base


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="in_progress")  # in_progress/completed/paused/abandoned
    progress = Column(Integer, nullable=False, default=0)  # 0-100
    target_date = Column(Date, nullable=True)
    start_date = Column(Date, nullable=True)
    completion_date = Column(DateTime, nullable=True)
    identity_label = Column(String(200), nullable=True)
    ai_plan = Column(JSON, nullable=True)  # opaque blob from the decomposition service
    ai_confidence_score = Column(Float, nullable=True)
    goal_type = Column(String(20), nullable=True)  # achievement/transformation/skill/project/...
    life_domain = Column(String(20), nullable=True)  # health/career/finance/learning/...
    deadline_type = Column(String(10), nullable=True)  # fixed/flexible/ongoing
    progress_type = Column(String(20), nullable=True)  # percentage/milestones/numeric_target
    decomposition_status = Column(String(20), nullable=True)  # pending/in_progress/completed
    target_value = Column(Float, nullable=True)
    current_value = Column(Float, nullable=True)
    unit = Column(String(50), nullable=True)
    why_important = Column(Text, nullable=True)
    difficulty_level = Column(Integer, nullable=True)
    estimated_hours = Column(Float, nullable=True)
    parent_goal_id = Column(Integer, ForeignKey("goals.id"), nullable=True)
    tags = Column(JSON, nullable=True)
    icon = Column(String(20), nullable=True)
    color = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
