"""
daily_plan_service.py — Daily plans
One plan per user per day: morning intention, time blocks, evening
reflection and the daily score. Each ritual pays XP the first time it is
completed for a given day.
"""

from pydantic import BaseModel, ValidationError as SchemaError
from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.daily_plan import DailyPlan
from models.task import Task
from services.common import check_choice, check_links, get_owned, parse_date, utcnow
from services.gamification_service import GamificationService

MORNING_XP = 10
EVENING_XP = 15
PERFECT_DAY_XP = 25
PERFECT_DAY_SCORE = 95

TIME_BLOCK_TYPES = ("deep_work", "shallow_work", "meeting", "break", "personal", "exercise", "routine")


class TimeBlock(BaseModel):
    id: str
    start_time: str
    end_time: str
    title: str
    type: str
    task_id: int | None = None
    completed: bool = False


def _parse_blocks(db: Session, caller: CallerContext, blocks) -> list[dict]:
    if not isinstance(blocks, list):
        raise ValidationError("time_blocks must be a list")
    try:
        parsed = [TimeBlock.model_validate(b) for b in blocks]
    except SchemaError as e:
        raise ValidationError(f"Invalid time block: {e.errors()[0]['msg']}")
    for block in parsed:
        check_choice("time block type", block.type, TIME_BLOCK_TYPES)
        check_links(db, caller, {"task_id": block.task_id}, {"task_id": (Task, "Task")})
    return [b.model_dump() for b in parsed]


class DailyPlanService:
    @staticmethod
    def get_or_create(db: Session, caller: CallerContext, on_date) -> DailyPlan:
        d = parse_date(on_date)
        if d is None:
            raise ValidationError("date is required")
        plan = db.query(DailyPlan).filter_by(user_id=caller.user_id, date=d).first()
        if plan:
            return plan
        plan = DailyPlan(user_id=caller.user_id, date=d)
        db.add(plan)
        commit(db)
        db.refresh(plan)
        return plan

    @staticmethod
    def get_by_date(db: Session, caller: CallerContext, on_date) -> DailyPlan | None:
        d = parse_date(on_date)
        if d is None:
            raise ValidationError("date is required")
        return db.query(DailyPlan).filter_by(user_id=caller.user_id, date=d).first()

    @staticmethod
    def set_morning_intention(db: Session, caller: CallerContext, plan_id: int, intention: str,
                              top_priorities: list[str] | None = None) -> DailyPlan:
        if not intention:
            raise ValidationError("intention is required")
        plan = get_owned(db, DailyPlan, plan_id, caller, "Plan")
        first_time = plan.morning_completed_at is None
        plan.intention = intention
        plan.top_priorities = top_priorities
        plan.morning_completed_at = utcnow()
        plan.updated_at = utcnow()
        commit(db)

        if first_time:
            GamificationService.award_xp(db, caller.user_id, MORNING_XP, "Set morning intention", source="morning_intention")
        db.refresh(plan)
        return plan

    @staticmethod
    def update_time_blocks(db: Session, caller: CallerContext, plan_id: int, time_blocks: list) -> DailyPlan:
        plan = get_owned(db, DailyPlan, plan_id, caller, "Plan")
        plan.time_blocks = _parse_blocks(db, caller, time_blocks)
        plan.updated_at = utcnow()
        commit(db)
        db.refresh(plan)
        return plan

    @staticmethod
    def set_evening_reflection(db: Session, caller: CallerContext, plan_id: int, data: dict) -> DailyPlan:
        plan = get_owned(db, DailyPlan, plan_id, caller, "Plan")
        rating = data.get("day_rating")
        if rating is not None and not 1 <= rating <= 10:
            raise ValidationError("day_rating must be between 1 and 10")
        first_time = plan.evening_completed_at is None

        for field in ("reflection", "gratitude", "tomorrow_plan", "day_rating"):
            if field in data:
                setattr(plan, field, data[field])
        plan.evening_completed_at = utcnow()
        plan.updated_at = utcnow()
        commit(db)

        if first_time:
            GamificationService.award_xp(db, caller.user_id, EVENING_XP, "Completed evening reflection", source="evening_reflection")
        db.refresh(plan)
        return plan

    @staticmethod
    def update_daily_score(db: Session, caller: CallerContext, plan_id: int, data: dict) -> DailyPlan:
        """
        Record the day's score and counters. Crossing into a perfect day
        (score 95 or more) pays a one-off bonus; re-reporting a perfect score
        pays nothing.
        """
        plan = get_owned(db, DailyPlan, plan_id, caller, "Plan")
        score = data.get("daily_score")
        if score is None or not 0 <= score <= 100:
            raise ValidationError("daily_score must be between 0 and 100")
        for field in ("tasks_completed_count", "tasks_total_count", "habits_completed_count",
                      "habits_total_count", "focus_minutes"):
            if data.get(field) is not None and data[field] < 0:
                raise ValidationError(f"{field} must not be negative")

        was_perfect = (plan.daily_score or 0) >= PERFECT_DAY_SCORE
        plan.daily_score = score
        for field in ("tasks_completed_count", "tasks_total_count", "habits_completed_count",
                      "habits_total_count", "focus_minutes"):
            if field in data:
                setattr(plan, field, data[field])
        plan.updated_at = utcnow()
        commit(db)

        if score >= PERFECT_DAY_SCORE and not was_perfect:
            GamificationService.award_xp(db, caller.user_id, PERFECT_DAY_XP, "Perfect Day! Score 95%+", source="perfect_day")
        db.refresh(plan)
        return plan

    @staticmethod
    def list_recent(db: Session, caller: CallerContext, days: int | None = None) -> list[DailyPlan]:
        query = (
            db.query(DailyPlan)
            .filter(DailyPlan.user_id == caller.user_id)
            .order_by(DailyPlan.date.desc())
        )
        if days:
            query = query.limit(days)
        return query.all()
