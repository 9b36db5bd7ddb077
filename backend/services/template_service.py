"""
template_service.py — Goal templates
Browsing, authoring and instantiating templates. Instantiation expands one
template into a goal, its milestones and suggested habits inside a single
transaction; a failure rolls everything back and reports how far it got.
"""

import logging
from datetime import timedelta

from pydantic import BaseModel, ValidationError as SchemaError
from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import AppError, NotFound, TemplateInstantiationError, ValidationError
from models.goal import Goal
from models.goal_template import GoalTemplate
from models.habit import Habit
from models.milestone import Milestone
from services.common import check_choice, parse_date
from services.goal_service import GOAL_TYPES, LIFE_DOMAINS

logger = logging.getLogger(__name__)

HOURS_PER_WEEK = 5

FREQUENCY_MAP = {
    "daily": "daily",
    "weekdays": "weekdays",
    "weekly": "weekly",
    "3x per week": "3x_week",
    "3x_week": "3x_week",
}


class TemplateMilestone(BaseModel):
    title: str
    description: str | None = None
    week_number: int


class SuggestedHabit(BaseModel):
    title: str
    frequency: str = "daily"
    estimated_minutes: int | None = None


def normalize_frequency(value: str | None) -> str:
    """Map a template's frequency text to a habit frequency. Matching is exact; unknown -> daily."""
    return FREQUENCY_MAP.get(value, "daily")


def _parse_items(schema, items, label: str) -> list:
    try:
        return [schema.model_validate(item) for item in (items or [])]
    except SchemaError as e:
        raise ValidationError(f"Invalid template {label}: {e.errors()[0]['msg']}")


class TemplateService:
    @staticmethod
    def list_public(db: Session, category: str | None = None, life_domain: str | None = None) -> list[GoalTemplate]:
        query = db.query(GoalTemplate).filter(GoalTemplate.is_public.is_(True))
        if category:
            query = query.filter(GoalTemplate.category == category)
        if life_domain:
            query = query.filter(GoalTemplate.life_domain == life_domain)
        return query.order_by(GoalTemplate.usage_count.desc(), GoalTemplate.id).all()

    @staticmethod
    def get(db: Session, template_id: int) -> GoalTemplate:
        template = db.get(GoalTemplate, template_id)
        if template is None:
            raise NotFound("Template not found")
        return template

    @staticmethod
    def create(db: Session, caller: CallerContext, data: dict) -> GoalTemplate:
        for field in ("title", "category", "life_domain", "goal_type", "estimated_weeks", "difficulty_level"):
            if data.get(field) in (None, ""):
                raise ValidationError(f"{field} is required")
        check_choice("life_domain", data["life_domain"], LIFE_DOMAINS)
        check_choice("goal_type", data["goal_type"], GOAL_TYPES)
        if data["estimated_weeks"] <= 0:
            raise ValidationError("estimated_weeks must be positive")

        milestones = _parse_items(TemplateMilestone, data.get("milestones"), "milestones")
        habits = _parse_items(SuggestedHabit, data.get("suggested_habits"), "suggested_habits")
        for m in milestones:
            if not 1 <= m.week_number <= data["estimated_weeks"]:
                raise ValidationError(
                    f"Milestone '{m.title}' week_number must be between 1 and {data['estimated_weeks']}"
                )

        template = GoalTemplate(
            title=data["title"],
            description=data.get("description") or "",
            category=data["category"],
            life_domain=data["life_domain"],
            goal_type=data["goal_type"],
            estimated_weeks=data["estimated_weeks"],
            difficulty_level=data["difficulty_level"],
            milestones=[m.model_dump() for m in milestones],
            suggested_habits=[h.model_dump() for h in habits] if data.get("suggested_habits") is not None else None,
            icon=data.get("icon"),
            color=data.get("color"),
            is_public=bool(data.get("is_public", False)),
            created_by=caller.user_id,
            usage_count=0,
        )
        db.add(template)
        commit(db)
        db.refresh(template)
        return template

    @staticmethod
    def use_template(db: Session, caller: CallerContext, template_id: int, target_date=None) -> dict:
        """
        Instantiate a template for the caller.

        Any authenticated user may instantiate any template id, public or
        not. Returns {"goal_id", "milestone_ids", "habit_ids"}.
        """
        template = TemplateService.get(db, template_id)
        target = parse_date(target_date, "target_date")
        milestones = sorted(
            _parse_items(TemplateMilestone, template.milestones, "milestones"),
            key=lambda m: m.week_number,
        )
        habits = _parse_items(SuggestedHabit, template.suggested_habits, "suggested_habits")
        weeks = template.estimated_weeks

        report = {"goal_id": None, "milestone_ids": [], "habit_ids": [], "usage_count_incremented": False}
        try:
            goal = Goal(
                user_id=caller.user_id,
                title=template.title,
                description=template.description,
                category=template.category,
                goal_type=template.goal_type,
                life_domain=template.life_domain,
                difficulty_level=template.difficulty_level,
                estimated_hours=weeks * HOURS_PER_WEEK,
                status="in_progress",
                progress=0,
                target_date=target,
                decomposition_status="completed",
                progress_type="milestones",
                icon=template.icon,
                color=template.color,
            )
            db.add(goal)
            db.flush()
            report["goal_id"] = goal.id

            for item in milestones:
                milestone = Milestone(
                    user_id=caller.user_id,
                    goal_id=goal.id,
                    title=item.title,
                    description=item.description,
                    sequence_order=item.week_number,
                    target_date=target - timedelta(days=(weeks - item.week_number) * 7) if target else None,
                    status="not_started",
                    progress_percentage=0,
                )
                db.add(milestone)
                db.flush()
                report["milestone_ids"].append(milestone.id)

            for item in habits:
                habit = Habit(
                    user_id=caller.user_id,
                    goal_id=goal.id,
                    title=item.title,
                    category=template.category,
                    frequency=normalize_frequency(item.frequency),
                    time_of_day="anytime",
                    estimated_minutes=item.estimated_minutes,
                    is_active=True,
                    streak_current=0,
                    streak_longest=0,
                )
                db.add(habit)
                db.flush()
                report["habit_ids"].append(habit.id)

            template.usage_count = (template.usage_count or 0) + 1
            db.flush()
            report["usage_count_incremented"] = True

            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Template {template_id} instantiation rolled back for user {caller.user_id}: {e}")
            message = e.message if isinstance(e, AppError) else f"Template instantiation failed: {e.__class__.__name__}"
            raise TemplateInstantiationError(message, report) from e

        logger.info(
            f"Template {template_id} used by user {caller.user_id}: goal {report['goal_id']}, "
            f"{len(report['milestone_ids'])} milestones, {len(report['habit_ids'])} habits"
        )
        return {
            "goal_id": report["goal_id"],
            "milestone_ids": report["milestone_ids"],
            "habit_ids": report["habit_ids"],
        }
