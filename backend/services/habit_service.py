"""
habit_service.py — Habits & Streaks tracking
Plan-gated creation, per-day completion toggles with streak bookkeeping and
XP, skips and log queries.
"""

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.goal import Goal
from models.habit import Habit
from models.habit_log import HabitLog
from services.common import apply_updates, check_choice, get_owned, parse_date, utcnow
from services.gamification_service import GamificationService
from services.plan_service import PlanService, user_lock

FREQUENCIES = ("daily", "weekdays", "weekends", "3x_week", "weekly", "custom")
TIMES_OF_DAY = ("morning", "afternoon", "evening", "anytime")

HABIT_XP = 10
STREAK_BONUSES = ((7, 5), (30, 10))  # (streak reached, extra XP)


def habit_xp(streak: int) -> int:
    return HABIT_XP + sum(bonus for days, bonus in STREAK_BONUSES if streak >= days)


def _validate(data: dict) -> None:
    if data.get("frequency") is not None:
        check_choice("frequency", data["frequency"], FREQUENCIES)
    if data.get("time_of_day") is not None:
        check_choice("time_of_day", data["time_of_day"], TIMES_OF_DAY)


class HabitService:
    @staticmethod
    def create(db: Session, caller: CallerContext, data: dict) -> Habit:
        if not data.get("title"):
            raise ValidationError("title is required")
        if not data.get("category"):
            raise ValidationError("category is required")
        data.setdefault("frequency", "daily")
        data.setdefault("time_of_day", "anytime")
        _validate(data)
        if data.get("goal_id") is not None:
            get_owned(db, Goal, data["goal_id"], caller, "Goal")

        with user_lock(caller.user_id):
            PlanService.enforce(db, caller, "habits")
            active = PlanService.count_active(db, caller.user_id, "habits")
            habit = Habit(
                user_id=caller.user_id,
                goal_id=data.get("goal_id"),
                title=data["title"],
                description=data.get("description"),
                category=data["category"],
                frequency=data["frequency"],
                custom_days=data.get("custom_days"),
                time_of_day=data["time_of_day"],
                identity_label=data.get("identity_label"),
                is_active=True,
                streak_current=0,
                streak_longest=0,
                estimated_minutes=data.get("estimated_minutes"),
                color=data.get("color"),
                icon=data.get("icon"),
                sort_order=active,
            )
            db.add(habit)
            commit(db)
        db.refresh(habit)
        return habit

    @staticmethod
    def list_active(db: Session, caller: CallerContext) -> list[Habit]:
        return (
            db.query(Habit)
            .filter_by(user_id=caller.user_id, is_active=True)
            .order_by(Habit.sort_order)
            .all()
        )

    @staticmethod
    def list_all(db: Session, caller: CallerContext) -> list[Habit]:
        return db.query(Habit).filter_by(user_id=caller.user_id).order_by(Habit.sort_order).all()

    @staticmethod
    def get(db: Session, caller: CallerContext, habit_id: int) -> Habit:
        return get_owned(db, Habit, habit_id, caller, "Habit")

    @staticmethod
    def update(db: Session, caller: CallerContext, habit_id: int, data: dict) -> Habit:
        habit = get_owned(db, Habit, habit_id, caller, "Habit")
        _validate(data)
        apply_updates(habit, data, {
            "title", "description", "category", "frequency", "custom_days", "time_of_day",
            "identity_label", "is_active", "color", "icon", "estimated_minutes",
        }, required={"frequency", "time_of_day", "is_active"})
        commit(db)
        db.refresh(habit)
        return habit

    @staticmethod
    def remove(db: Session, caller: CallerContext, habit_id: int) -> None:
        habit = get_owned(db, Habit, habit_id, caller, "Habit")
        db.query(HabitLog).filter_by(habit_id=habit.id).delete()
        db.delete(habit)
        commit(db)

    @staticmethod
    def toggle_complete(db: Session, caller: CallerContext, habit_id: int, on_date, mood: int | None = None, note: str | None = None) -> dict:
        """Flip completion for one day. Un-completing never takes XP back."""
        habit = get_owned(db, Habit, habit_id, caller, "Habit")
        d = parse_date(on_date)
        if d is None:
            raise ValidationError("date is required")

        log = db.query(HabitLog).filter_by(habit_id=habit.id, date=d).first()
        if log and log.status == "completed":
            db.delete(log)
            habit.streak_current = max(0, (habit.streak_current or 0) - 1)
            habit.updated_at = utcnow()
            commit(db)
            return {"action": "uncompleted", "streak": habit.streak_current, "xp_gain": 0}

        if log:
            # was skipped
            log.status = "completed"
            log.mood = mood
            log.note = note
            log.completed_at = utcnow()
        else:
            db.add(HabitLog(
                habit_id=habit.id,
                user_id=caller.user_id,
                date=d,
                status="completed",
                mood=mood,
                note=note,
                completed_at=utcnow(),
            ))

        streak = (habit.streak_current or 0) + 1
        habit.streak_current = streak
        habit.streak_longest = max(habit.streak_longest or 0, streak)
        habit.updated_at = utcnow()
        title = habit.title
        commit(db)

        xp_gain = habit_xp(streak)
        GamificationService.award_xp(db, caller.user_id, xp_gain, f"Habit: {title}", source="habit_complete")
        return {"action": "completed", "streak": streak, "xp_gain": xp_gain}

    @staticmethod
    def skip(db: Session, caller: CallerContext, habit_id: int, on_date) -> dict:
        """Record a skip. The streak is left alone ("never miss twice")."""
        habit = get_owned(db, Habit, habit_id, caller, "Habit")
        d = parse_date(on_date)
        if d is None:
            raise ValidationError("date is required")
        log = db.query(HabitLog).filter_by(habit_id=habit.id, date=d).first()
        if log:
            log.status = "skipped"
        else:
            db.add(HabitLog(habit_id=habit.id, user_id=caller.user_id, date=d, status="skipped"))
        commit(db)
        return {"action": "skipped"}

    @staticmethod
    def logs_for_range(db: Session, caller: CallerContext, start, end) -> list[HabitLog]:
        start_d, end_d = parse_date(start, "start_date"), parse_date(end, "end_date")
        if start_d is None or end_d is None:
            raise ValidationError("start_date and end_date are required")
        return (
            db.query(HabitLog)
            .filter(
                HabitLog.user_id == caller.user_id,
                HabitLog.date >= start_d,
                HabitLog.date <= end_d,
            )
            .order_by(HabitLog.date)
            .all()
        )
