"""
goal_service.py — Goal lifecycle
Plan-gated creation, partial updates, AI plan storage and numeric progress.
"""

import logging

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.goal import Goal
from models.milestone import Milestone
from services.common import apply_updates, check_choice, get_owned, parse_date, utcnow
from services.leveling import round_half_up
from services.plan_service import PlanService, user_lock

logger = logging.getLogger(__name__)

GOAL_STATUSES = ("in_progress", "completed", "paused", "abandoned")
GOAL_TYPES = (
    "achievement", "transformation", "skill", "project",
    "quantitative", "maintenance", "elimination", "relationship",
)
LIFE_DOMAINS = (
    "health", "career", "finance", "learning",
    "relationships", "creativity", "mindfulness", "personal_growth",
)
DEADLINE_TYPES = ("fixed", "flexible", "ongoing")
PROGRESS_TYPES = ("percentage", "milestones", "numeric_target")
DECOMPOSITION_STATUSES = ("pending", "in_progress", "completed")

UPDATABLE_FIELDS = {
    "title", "description", "category", "status", "progress", "target_date", "start_date",
    "identity_label", "ai_plan", "goal_type", "life_domain", "deadline_type", "progress_type",
    "target_value", "current_value", "unit", "why_important", "difficulty_level",
    "estimated_hours", "tags", "icon", "color", "decomposition_status", "ai_confidence_score",
}


def validate_goal_fields(data: dict) -> None:
    """Check enum and range fields present in data."""
    for field, allowed in (
        ("status", GOAL_STATUSES),
        ("goal_type", GOAL_TYPES),
        ("life_domain", LIFE_DOMAINS),
        ("deadline_type", DEADLINE_TYPES),
        ("progress_type", PROGRESS_TYPES),
        ("decomposition_status", DECOMPOSITION_STATUSES),
    ):
        if data.get(field) is not None:
            check_choice(field, data[field], allowed)
    progress = data.get("progress")
    if progress is not None and not 0 <= progress <= 100:
        raise ValidationError("progress must be between 0 and 100")
    for field in ("target_date", "start_date"):
        if field in data:
            data[field] = parse_date(data[field], field)


class GoalService:
    @staticmethod
    def create(db: Session, caller: CallerContext, data: dict) -> Goal:
        if not data.get("title"):
            raise ValidationError("title is required")
        if not data.get("category"):
            raise ValidationError("category is required")
        validate_goal_fields(data)

        with user_lock(caller.user_id):
            PlanService.enforce(db, caller, "goals")
            target_value = data.get("target_value")
            goal = Goal(
                user_id=caller.user_id,
                title=data["title"],
                description=data.get("description"),
                category=data["category"],
                status="in_progress",
                progress=0,
                target_date=data.get("target_date"),
                start_date=data.get("start_date"),
                identity_label=data.get("identity_label"),
                goal_type=data.get("goal_type"),
                life_domain=data.get("life_domain"),
                deadline_type=data.get("deadline_type"),
                why_important=data.get("why_important"),
                difficulty_level=data.get("difficulty_level"),
                estimated_hours=data.get("estimated_hours"),
                target_value=target_value,
                current_value=0 if target_value else None,
                unit=data.get("unit"),
                tags=data.get("tags"),
                icon=data.get("icon"),
                color=data.get("color"),
                parent_goal_id=data.get("parent_goal_id"),
                decomposition_status="pending",
            )
            if goal.parent_goal_id is not None:
                get_owned(db, Goal, goal.parent_goal_id, caller, "Parent goal")
            db.add(goal)
            commit(db)
        db.refresh(goal)
        return goal

    @staticmethod
    def list_active(db: Session, caller: CallerContext) -> list[Goal]:
        return db.query(Goal).filter_by(user_id=caller.user_id, status="in_progress").all()

    @staticmethod
    def list_all(db: Session, caller: CallerContext) -> list[Goal]:
        return db.query(Goal).filter_by(user_id=caller.user_id).all()

    @staticmethod
    def list_by_domain(db: Session, caller: CallerContext, life_domain: str) -> list[Goal]:
        check_choice("life_domain", life_domain, LIFE_DOMAINS)
        return db.query(Goal).filter_by(user_id=caller.user_id, life_domain=life_domain).all()

    @staticmethod
    def get(db: Session, caller: CallerContext, goal_id: int) -> Goal:
        return get_owned(db, Goal, goal_id, caller, "Goal")

    @staticmethod
    def update(db: Session, caller: CallerContext, goal_id: int, data: dict) -> Goal:
        goal = get_owned(db, Goal, goal_id, caller, "Goal")
        validate_goal_fields(data)
        was_completed = goal.status == "completed"
        apply_updates(goal, data, UPDATABLE_FIELDS)

        # Stamp the first transition into completed
        if data.get("status") == "completed" and not was_completed:
            goal.completion_date = utcnow()

        commit(db)
        db.refresh(goal)
        return goal

    @staticmethod
    def remove(db: Session, caller: CallerContext, goal_id: int) -> None:
        goal = get_owned(db, Goal, goal_id, caller, "Goal")
        db.query(Milestone).filter_by(goal_id=goal.id, user_id=caller.user_id).delete()
        db.delete(goal)
        commit(db)

    @staticmethod
    def store_ai_plan(db: Session, caller: CallerContext, goal_id: int, ai_plan, ai_confidence_score: float | None = None) -> Goal:
        goal = get_owned(db, Goal, goal_id, caller, "Goal")
        goal.ai_plan = ai_plan
        goal.ai_confidence_score = ai_confidence_score
        goal.decomposition_status = "completed"
        goal.updated_at = utcnow()
        commit(db)
        db.refresh(goal)
        return goal

    @staticmethod
    def update_progress(db: Session, caller: CallerContext, goal_id: int, current_value: float) -> Goal:
        """Numeric goals: derive percentage progress and auto-complete at the target."""
        goal = get_owned(db, Goal, goal_id, caller, "Goal")
        goal.current_value = current_value
        goal.updated_at = utcnow()

        if goal.target_value and goal.target_value > 0:
            goal.progress = min(100, round_half_up(current_value / goal.target_value * 100))

        if goal.target_value and current_value >= goal.target_value and goal.status == "in_progress":
            goal.status = "completed"
            goal.completion_date = utcnow()

        commit(db)
        db.refresh(goal)
        return goal
