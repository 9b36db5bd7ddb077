"""
habit_stack_service.py — Ordered chains of the caller's habits
"""

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.habit import Habit
from models.habit_stack import HabitStack
from services.common import apply_updates, get_owned


def _check_habits(db: Session, caller: CallerContext, habit_ids) -> list[int]:
    if not isinstance(habit_ids, list):
        raise ValidationError("habit_ids must be a list")
    for habit_id in habit_ids:
        get_owned(db, Habit, habit_id, caller, "Habit")
    return list(habit_ids)


class HabitStackService:
    @staticmethod
    def create(db: Session, caller: CallerContext, name: str, habit_ids: list[int]) -> HabitStack:
        if not name:
            raise ValidationError("name is required")
        stack = HabitStack(user_id=caller.user_id, name=name, habit_ids=_check_habits(db, caller, habit_ids))
        db.add(stack)
        commit(db)
        db.refresh(stack)
        return stack

    @staticmethod
    def list(db: Session, caller: CallerContext) -> list[HabitStack]:
        return db.query(HabitStack).filter_by(user_id=caller.user_id).order_by(HabitStack.id).all()

    @staticmethod
    def update(db: Session, caller: CallerContext, stack_id: int, data: dict) -> HabitStack:
        stack = get_owned(db, HabitStack, stack_id, caller, "Habit stack")
        if "name" in data and not data["name"]:
            raise ValidationError("name must not be empty")
        if "habit_ids" in data:
            data["habit_ids"] = _check_habits(db, caller, data["habit_ids"])
        apply_updates(stack, data, {"name", "habit_ids"})
        commit(db)
        db.refresh(stack)
        return stack

    @staticmethod
    def remove(db: Session, caller: CallerContext, stack_id: int) -> None:
        stack = get_owned(db, HabitStack, stack_id, caller, "Habit stack")
        db.delete(stack)
        commit(db)
