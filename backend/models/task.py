from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, ForeignKey, JSON
from database import Base


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    list_id = Column(Integer, ForeignKey("task_lists.id"), nullable=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=True)
    milestone_id = Column(Integer, ForeignKey("milestones.id"), nullable=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    priority = Column(String(20), nullable=False, default="medium")  # low/medium/high/urgent
    status = Column(String(20), nullable=False, default="todo")  # todo/in_progress/done
    due_date = Column(Date, nullable=True)
    scheduled_date = Column(Date, nullable=True)
    estimated_minutes = Column(Integer, nullable=True)
    actual_minutes = Column(Integer, nullable=True)
    tags = Column(JSON, nullable=True)
    subtasks = Column(JSON, nullable=False, default=list)  # [{id, title, completed}]
    is_pinned = Column(Boolean, default=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
