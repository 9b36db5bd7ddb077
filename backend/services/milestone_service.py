"""
milestone_service.py — Milestones under a goal
Completing a milestone recomputes the goal's progress from its milestones
and awards XP.
"""

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.goal import Goal
from models.milestone import Milestone
from services.common import apply_updates, check_choice, get_owned, parse_date, utcnow
from services.gamification_service import GamificationService
from services.leveling import round_half_up

MILESTONE_STATUSES = ("not_started", "in_progress", "completed", "skipped")
MILESTONE_XP = 50


def _build(caller: CallerContext, goal_id: int, item: dict) -> Milestone:
    if not item.get("title"):
        raise ValidationError("Milestone title is required")
    if item.get("sequence_order") is None:
        raise ValidationError("Milestone sequence_order is required")
    return Milestone(
        user_id=caller.user_id,
        goal_id=goal_id,
        title=item["title"],
        description=item.get("description"),
        sequence_order=item["sequence_order"],
        target_date=parse_date(item.get("target_date"), "target_date"),
        status="not_started",
        progress_percentage=0,
        completion_criteria=item.get("completion_criteria"),
    )


class MilestoneService:
    @staticmethod
    def create(db: Session, caller: CallerContext, goal_id: int, data: dict) -> Milestone:
        get_owned(db, Goal, goal_id, caller, "Goal")
        milestone = _build(caller, goal_id, data)
        db.add(milestone)
        commit(db)
        db.refresh(milestone)
        return milestone

    @staticmethod
    def bulk_create(db: Session, caller: CallerContext, goal_id: int, items: list[dict]) -> list[int]:
        goal = get_owned(db, Goal, goal_id, caller, "Goal")
        milestones = [_build(caller, goal_id, item) for item in items]
        db.add_all(milestones)
        goal.decomposition_status = "completed"
        goal.progress_type = "milestones"
        goal.updated_at = utcnow()
        commit(db)
        return [m.id for m in milestones]

    @staticmethod
    def list_by_goal(db: Session, caller: CallerContext, goal_id: int) -> list[Milestone]:
        return (
            db.query(Milestone)
            .filter_by(goal_id=goal_id, user_id=caller.user_id)
            .order_by(Milestone.sequence_order)
            .all()
        )

    @staticmethod
    def next_for_goal(db: Session, caller: CallerContext, goal_id: int) -> Milestone | None:
        return (
            db.query(Milestone)
            .filter(
                Milestone.goal_id == goal_id,
                Milestone.user_id == caller.user_id,
                Milestone.status.notin_(("completed", "skipped")),
            )
            .order_by(Milestone.sequence_order)
            .first()
        )

    @staticmethod
    def update(db: Session, caller: CallerContext, milestone_id: int, data: dict) -> Milestone:
        milestone = get_owned(db, Milestone, milestone_id, caller, "Milestone")
        if data.get("status") is not None:
            check_choice("status", data["status"], MILESTONE_STATUSES)
        if "target_date" in data:
            data["target_date"] = parse_date(data["target_date"], "target_date")

        completing = data.get("status") == "completed" and milestone.status != "completed"
        apply_updates(milestone, data, {
            "title", "description", "sequence_order", "status", "progress_percentage", "target_date", "completion_criteria",
        })
        if data.get("status") == "completed":
            milestone.completed_date = utcnow()
            milestone.progress_percentage = 100

        if completing:
            MilestoneService._recompute_goal(db, caller, milestone.goal_id)

        commit(db)
        db.refresh(milestone)

        if completing:
            GamificationService.award_xp(
                db, caller.user_id, MILESTONE_XP,
                f"Completed milestone: {milestone.title}", source="milestone_complete",
            )
        return milestone

    @staticmethod
    def _recompute_goal(db: Session, caller: CallerContext, goal_id: int) -> None:
        goal = db.get(Goal, goal_id)
        if goal is None:
            return
        milestones = db.query(Milestone).filter_by(goal_id=goal_id, user_id=caller.user_id).all()
        done = sum(1 for m in milestones if m.status == "completed")
        progress = round_half_up(done / len(milestones) * 100) if milestones else 0
        goal.progress = progress
        goal.status = "completed" if progress >= 100 else "in_progress"
        goal.completion_date = utcnow() if progress >= 100 else None
        goal.updated_at = utcnow()

    @staticmethod
    def remove(db: Session, caller: CallerContext, milestone_id: int) -> None:
        milestone = get_owned(db, Milestone, milestone_id, caller, "Milestone")
        db.delete(milestone)
        commit(db)
