"""
wellness_service.py — Mood check-ins and journaling
"""

from datetime import timedelta

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.goal import Goal
from models.habit_log import HabitLog
from models.journal import JournalEntry
from models.mood_entry import MoodEntry
from services.common import check_choice, check_links, parse_date, utcnow

JOURNAL_TYPES = ("reflection", "gratitude", "goal_note", "freeform")


class WellnessService:
    @staticmethod
    def log_mood(db: Session, caller: CallerContext, on_date, score: int, notes: str | None = None, tags: list | None = None) -> MoodEntry:
        """One entry per day: logging again overwrites score, notes and tags."""
        d = parse_date(on_date)
        if d is None:
            raise ValidationError("date is required")
        if score is None or not 1 <= score <= 10:
            raise ValidationError("score must be between 1 and 10")

        entry = db.query(MoodEntry).filter_by(user_id=caller.user_id, date=d).first()
        if entry:
            entry.score = score
            entry.notes = notes
            entry.tags = tags
            entry.updated_at = utcnow()
        else:
            entry = MoodEntry(user_id=caller.user_id, date=d, score=score, notes=notes, tags=tags)
            db.add(entry)
        commit(db)
        db.refresh(entry)
        return entry

    @staticmethod
    def mood_history(db: Session, caller: CallerContext, days: int | None = None) -> list[MoodEntry]:
        query = db.query(MoodEntry).filter(MoodEntry.user_id == caller.user_id)
        if days:
            query = query.filter(MoodEntry.date >= utcnow().date() - timedelta(days=days))
        return query.order_by(MoodEntry.date.desc()).all()

    @staticmethod
    def create_journal_entry(db: Session, caller: CallerContext, data: dict) -> JournalEntry:
        d = parse_date(data.get("date"))
        if d is None:
            raise ValidationError("date is required")
        if not data.get("content"):
            raise ValidationError("content is required")
        entry_type = data.get("type") or "freeform"
        check_choice("type", entry_type, JOURNAL_TYPES)
        check_links(db, caller, data, {"goal_id": (Goal, "Goal"), "habit_log_id": (HabitLog, "Habit log")})

        entry = JournalEntry(
            user_id=caller.user_id,
            date=d,
            content=data["content"],
            type=entry_type,
            habit_log_id=data.get("habit_log_id"),
            goal_id=data.get("goal_id"),
        )
        db.add(entry)
        commit(db)
        db.refresh(entry)
        return entry

    @staticmethod
    def journal_entries(db: Session, caller: CallerContext, limit: int | None = None) -> list[JournalEntry]:
        query = (
            db.query(JournalEntry)
            .filter(JournalEntry.user_id == caller.user_id)
            .order_by(JournalEntry.date.desc(), JournalEntry.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()
