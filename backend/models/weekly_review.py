from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Text, Date, DateTime, Boolean, ForeignKey, JSON, UniqueConstraint
from database import Base


class WeeklyReview(Base):
    __tablename__ = "weekly_reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    week_start_date = Column(Date, nullable=False)
    week_end_date = Column(Date, nullable=False)
    tasks_completed = Column(Integer, nullable=False, default=0)
    tasks_total = Column(Integer, nullable=False, default=0)
    habits_completion_rate = Column(Integer, nullable=False, default=0)  # percent
    focus_total_minutes = Column(Integer, nullable=False, default=0)
    streak_days = Column(Integer, nullable=False, default=0)
    xp_earned = Column(Integer, nullable=False, default=0)
    goals_progressed = Column(JSON, nullable=True)  # [{goal_id, title, progress_change}]
    highlights = Column(JSON, nullable=True)
    areas_to_improve = Column(JSON, nullable=True)
    user_reflection = Column(Text, nullable=True)
    next_week_goals = Column(JSON, nullable=True)
    overall_rating = Column(Integer, nullable=True)
    reviewed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "week_start_date", name="uq_review_user_week"),
    )
