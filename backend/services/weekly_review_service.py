"""
weekly_review_service.py — Weekly reviews
Snapshot a week's activity (tasks, habits, focus, XP, active days), then let
the user add a reflection. The first submitted reflection earns 30 XP.
"""

from datetime import datetime, time, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.daily_plan import DailyPlan
from models.focus_session import FocusSession
from models.gamification import XPEvent
from models.goal import Goal
from models.habit_log import HabitLog
from models.task import Task
from models.weekly_review import WeeklyReview
from services.common import get_owned, parse_date
from services.gamification_service import GamificationService
from services.leveling import round_half_up

REVIEW_XP = 30

REFLECTION_FIELDS = ("user_reflection", "next_week_goals", "overall_rating", "highlights", "areas_to_improve")


def _window(start, end) -> tuple[datetime, datetime]:
    """UTC bounds covering every instant from start through the end of end's day."""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


class WeeklyReviewService:
    @staticmethod
    def generate(db: Session, caller: CallerContext, week_start, week_end) -> WeeklyReview:
        """
        Build the review for a week, or return the existing one for the same
        start date. Stats are a snapshot taken at generation time.
        """
        start = parse_date(week_start, "week_start_date")
        end = parse_date(week_end, "week_end_date")
        if start is None or end is None:
            raise ValidationError("week_start_date and week_end_date are required")
        if end < start:
            raise ValidationError("week_end_date must not be before week_start_date")

        existing = db.query(WeeklyReview).filter_by(user_id=caller.user_id, week_start_date=start).first()
        if existing:
            return existing

        lo, hi = _window(start, end)
        uid = caller.user_id

        week_tasks = (
            db.query(Task)
            .filter(Task.user_id == uid, Task.created_at >= lo, Task.created_at < hi)
            .all()
        )
        logs = (
            db.query(HabitLog)
            .filter(HabitLog.user_id == uid, HabitLog.date >= start, HabitLog.date <= end)
            .all()
        )
        completed_logs = [l for l in logs if l.status == "completed"]
        sessions = (
            db.query(FocusSession)
            .filter(FocusSession.user_id == uid, FocusSession.completed_at >= lo, FocusSession.completed_at < hi)
            .all()
        )
        xp_earned = (
            db.query(func.coalesce(func.sum(XPEvent.amount), 0))
            .filter(XPEvent.user_id == uid, XPEvent.created_at >= lo, XPEvent.created_at < hi)
            .scalar()
        )
        goals = db.query(Goal).filter_by(user_id=uid, status="in_progress").all()

        # a day counts as active if it has a plan, a habit log or a finished task
        active_days = {p.date for p in db.query(DailyPlan).filter(
            DailyPlan.user_id == uid, DailyPlan.date >= start, DailyPlan.date <= end
        )}
        active_days.update(l.date for l in logs)
        done_tasks = (
            db.query(Task)
            .filter(Task.user_id == uid, Task.completed_at >= lo, Task.completed_at < hi)
            .all()
        )
        active_days.update(t.completed_at.date() for t in done_tasks)

        review = WeeklyReview(
            user_id=uid,
            week_start_date=start,
            week_end_date=end,
            tasks_completed=sum(1 for t in week_tasks if t.status == "done"),
            tasks_total=len(week_tasks),
            habits_completion_rate=round_half_up(len(completed_logs) / len(logs) * 100) if logs else 0,
            focus_total_minutes=sum(
                s.actual_duration if s.actual_duration is not None else s.duration for s in sessions
            ),
            streak_days=len(active_days),
            xp_earned=int(xp_earned or 0),
            goals_progressed=[
                {"goal_id": g.id, "title": g.title, "progress_change": g.progress} for g in goals
            ],
            reviewed=False,
        )
        db.add(review)
        commit(db)
        db.refresh(review)
        return review

    @staticmethod
    def get_by_week(db: Session, caller: CallerContext, week_start) -> WeeklyReview | None:
        start = parse_date(week_start, "week_start_date")
        if start is None:
            raise ValidationError("week_start_date is required")
        return db.query(WeeklyReview).filter_by(user_id=caller.user_id, week_start_date=start).first()

    @staticmethod
    def submit_reflection(db: Session, caller: CallerContext, review_id: int, data: dict) -> WeeklyReview:
        review = get_owned(db, WeeklyReview, review_id, caller, "Review")
        rating = data.get("overall_rating")
        if rating is not None and not 1 <= rating <= 10:
            raise ValidationError("overall_rating must be between 1 and 10")
        first_time = not review.reviewed

        for field in REFLECTION_FIELDS:
            if field in data:
                setattr(review, field, data[field])
        review.reviewed = True
        commit(db)

        if first_time:
            GamificationService.award_xp(db, caller.user_id, REVIEW_XP, "Completed weekly review", source="weekly_review")
        db.refresh(review)
        return review

    @staticmethod
    def list_all(db: Session, caller: CallerContext) -> list[WeeklyReview]:
        return (
            db.query(WeeklyReview)
            .filter(WeeklyReview.user_id == caller.user_id)
            .order_by(WeeklyReview.week_start_date.desc())
            .all()
        )
