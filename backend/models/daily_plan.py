from datetime import datetime, timezone

from sqlalchemy import Column, Integer, Text, Date, DateTime, ForeignKey, JSON, UniqueConstraint
from database import Base


class DailyPlan(Base):
    __tablename__ = "daily_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    intention = Column(Text, nullable=True)
    top_priorities = Column(JSON, nullable=True)  # [str]
    time_blocks = Column(JSON, nullable=True)  # [{id, start_time, end_time, title, type, task_id, completed}]
    daily_score = Column(Integer, nullable=True)  # 0-100
    tasks_completed_count = Column(Integer, nullable=True)
    tasks_total_count = Column(Integer, nullable=True)
    habits_completed_count = Column(Integer, nullable=True)
    habits_total_count = Column(Integer, nullable=True)
    focus_minutes = Column(Integer, nullable=True)
    reflection = Column(Text, nullable=True)
    gratitude = Column(JSON, nullable=True)  # [str]
    tomorrow_plan = Column(Text, nullable=True)
    day_rating = Column(Integer, nullable=True)  # 1-10
    morning_completed_at = Column(DateTime, nullable=True)
    evening_completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_plan_user_date"),
    )
