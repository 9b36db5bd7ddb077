"""
plan_service.py — Plan gating
Counts the caller's active rows and rejects creates at or above the plan's
limit. The count and the insert that follows run under a per-user lock so
two concurrent creates cannot both pass the check (single-process only).
"""

import logging
import threading
from contextlib import contextmanager

from sqlalchemy.orm import Session

from auth import CallerContext
from errors import PlanLimitExceeded
from models.goal import Goal
from models.habit import Habit
from plans import get_limits

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_user_locks: dict[int, threading.Lock] = {}


@contextmanager
def user_lock(user_id: int):
    """Serialize check-and-create sequences for one user."""
    with _registry_lock:
        lock = _user_locks.setdefault(user_id, threading.Lock())
    with lock:
        yield


class PlanService:
    @staticmethod
    def count_active(db: Session, user_id: int, resource: str) -> int:
        if resource == "goals":
            return db.query(Goal).filter_by(user_id=user_id, status="in_progress").count()
        if resource == "habits":
            return db.query(Habit).filter_by(user_id=user_id, is_active=True).count()
        raise ValueError(f"No plan limit for resource '{resource}'")

    @staticmethod
    def enforce(db: Session, caller: CallerContext, resource: str) -> None:
        limits = get_limits(caller.plan)
        limit = limits.max_goals if resource == "goals" else limits.max_habits
        active = PlanService.count_active(db, caller.user_id, resource)
        if active >= limit:
            logger.info(f"Plan limit hit: user={caller.user_id} plan={caller.plan} {resource}={active}/{limit}")
            raise PlanLimitExceeded(caller.plan, int(limit), resource)

    @staticmethod
    def get_limits(caller: CallerContext) -> dict:
        return {"plan": caller.plan, "limits": get_limits(caller.plan).to_dict()}
