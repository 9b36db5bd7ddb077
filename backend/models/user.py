from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(String(255), unique=True, nullable=False, index=True)  # identity provider subject
    email = Column(String(255), nullable=False, default="")
    name = Column(String(200), nullable=False, default="User")
    image_url = Column(String(500), nullable=True)
    plan = Column(String(20), nullable=False, default="free")  # free/pro/lifetime
    timezone = Column(String(64), nullable=True)
    theme = Column(String(10), nullable=True)  # light/dark/system
    onboarding_complete = Column(Boolean, default=False)
    streak_freeze_count = Column(Integer, default=1)
    last_active_at = Column(DateTime, nullable=True)
    recovery_status = Column(String(20), nullable=True)  # active/recovering
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
