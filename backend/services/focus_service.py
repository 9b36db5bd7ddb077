"""
focus_service.py — Focus sessions
Start, complete, cancel, distraction logging and aggregate stats. Finished
sessions earn round(minutes * 0.5) + 5 XP.
"""

from datetime import datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.focus_session import FocusSession
from models.habit import Habit
from models.task import Task
from services.common import check_choice, check_links, get_owned, utcnow
from services.gamification_service import GamificationService
from services.leveling import round_half_up

SESSION_TYPES = ("pomodoro", "deep_work", "custom")


def focus_xp(minutes: int) -> int:
    return round_half_up(minutes * 0.5) + 5


class FocusService:
    @staticmethod
    def start(db: Session, caller: CallerContext, data: dict) -> FocusSession:
        check_choice("type", data.get("type"), SESSION_TYPES)
        duration = data.get("duration_minutes")
        if duration is None or duration <= 0:
            raise ValidationError("duration_minutes must be positive")
        check_links(db, caller, data, {"habit_id": (Habit, "Habit"), "task_id": (Task, "Task")})
        session = FocusSession(
            user_id=caller.user_id,
            type=data["type"],
            duration=duration,
            habit_id=data.get("habit_id"),
            task_id=data.get("task_id"),
            distraction_count=0,
            distractions=[],
        )
        db.add(session)
        commit(db)
        db.refresh(session)
        return session

    @staticmethod
    def complete(db: Session, caller: CallerContext, session_id: int, actual_minutes: int | None = None,
                 focus_score: int | None = None, distraction_count: int | None = None,
                 notes: str | None = None) -> dict:
        session = get_owned(db, FocusSession, session_id, caller, "Session")
        minutes = actual_minutes if actual_minutes is not None else session.duration
        if minutes < 0:
            raise ValidationError("actual_minutes must not be negative")

        if distraction_count is not None:
            session.distraction_count = distraction_count
        session.actual_duration = minutes
        session.completed_at = utcnow()
        session.completion_status = "completed"
        session.focus_score = focus_score if focus_score is not None else max(0, 100 - (session.distraction_count or 0) * 10)
        if notes is not None:
            session.notes = notes
        session_type = session.type
        commit(db)

        xp_gain = focus_xp(minutes)
        GamificationService.award_xp(
            db, caller.user_id, xp_gain, f"{session_type} session: {minutes} min", source="focus_session",
        )
        return {"xp_gain": xp_gain}

    @staticmethod
    def cancel(db: Session, caller: CallerContext, session_id: int, actual_minutes: int | None = None,
               reason: str | None = None) -> dict:
        """Abandon a session. Time actually spent still earns XP."""
        session = get_owned(db, FocusSession, session_id, caller, "Session")
        minutes = actual_minutes or 0
        if minutes < 0:
            raise ValidationError("actual_minutes must not be negative")
        session.actual_duration = minutes
        session.completed_at = utcnow()
        session.completion_status = "abandoned"
        session.notes = reason
        session_type = session.type
        commit(db)

        xp_gain = 0
        if minutes > 0:
            xp_gain = focus_xp(minutes)
            GamificationService.award_xp(
                db, caller.user_id, xp_gain, f"{session_type} session (cancelled): {minutes} min",
                source="focus_session",
            )
        return {"xp_gain": xp_gain}

    @staticmethod
    def log_distraction(db: Session, caller: CallerContext, session_id: int, description: str | None = None) -> FocusSession:
        session = get_owned(db, FocusSession, session_id, caller, "Session")
        session.distractions = list(session.distractions or []) + [
            {"timestamp": utcnow().isoformat(), "description": description}
        ]
        session.distraction_count = (session.distraction_count or 0) + 1
        commit(db)
        db.refresh(session)
        return session

    @staticmethod
    def get(db: Session, caller: CallerContext, session_id: int) -> FocusSession:
        return get_owned(db, FocusSession, session_id, caller, "Session")

    @staticmethod
    def today(db: Session, caller: CallerContext) -> list[FocusSession]:
        start_of_day = datetime.combine(utcnow().date(), time.min, tzinfo=timezone.utc)
        return (
            db.query(FocusSession)
            .filter(FocusSession.user_id == caller.user_id, FocusSession.started_at >= start_of_day)
            .order_by(FocusSession.started_at.desc())
            .all()
        )

    @staticmethod
    def stats(db: Session, caller: CallerContext, days: int | None = None) -> dict:
        query = db.query(FocusSession).filter(FocusSession.user_id == caller.user_id)
        if days:
            query = query.filter(FocusSession.started_at >= utcnow() - timedelta(days=days))
        sessions = query.all()

        total_minutes = sum(s.actual_duration if s.actual_duration is not None else s.duration for s in sessions)
        total_sessions = len(sessions)
        by_type = {t: 0 for t in SESSION_TYPES}
        for s in sessions:
            by_type[s.type] = by_type.get(s.type, 0) + 1
        scored = [s.focus_score for s in sessions if s.focus_score is not None]

        return {
            "total_minutes": total_minutes,
            "total_sessions": total_sessions,
            "avg_minutes": round_half_up(total_minutes / total_sessions) if total_sessions else 0,
            "total_hours": round(total_minutes / 60, 1),
            "avg_focus_score": round_half_up(sum(scored) / len(scored)) if scored else 0,
            "total_distractions": sum(s.distraction_count or 0 for s in sessions),
            "by_type": by_type,
        }
