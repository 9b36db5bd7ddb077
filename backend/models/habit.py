from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, JSON
from database import Base


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)
    frequency = Column(String(20), default="daily")  # daily/weekdays/weekends/3x_week/weekly/custom
    custom_days = Column(JSON, nullable=True)  # weekday numbers for "custom"
    time_of_day = Column(String(20), default="anytime")  # morning/afternoon/evening/anytime
    identity_label = Column(String(200), nullable=True)
    is_active = Column(Boolean, default=True)
    streak_current = Column(Integer, default=0)
    streak_longest = Column(Integer, default=0)
    estimated_minutes = Column(Integer, nullable=True)
    color = Column(String(20), nullable=True)
    icon = Column(String(10), nullable=True)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
