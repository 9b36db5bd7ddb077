"""
recovery_service.py — Recovery protocol
Detects a lapse from the user's last activity and walks a recovery through
five phases. Finishing the last phase closes the recovery and pays the
comeback bonus.
"""

import logging
from datetime import timezone

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.recovery_log import RecoveryLog
from models.user import User
from services.common import check_choice, get_owned, utcnow
from services.gamification_service import GamificationService

logger = logging.getLogger(__name__)

COMEBACK_XP = 100

PHASES = ("acknowledgement", "assessment", "minimal_restart", "gradual_rebuild", "full_momentum")
TRIGGER_REASONS = ("streak_break", "long_absence", "engagement_drop", "user_initiated")


def suggested_phase(days_inactive: int) -> str:
    """Longer absences start earlier in the protocol."""
    if days_inactive >= 14:
        return "acknowledgement"
    if days_inactive >= 7:
        return "assessment"
    if days_inactive >= 3:
        return "minimal_restart"
    return "full_momentum"


def _as_utc(value):
    # SQLite hands back naive datetimes
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class RecoveryService:
    @staticmethod
    def get_active(db: Session, caller: CallerContext) -> RecoveryLog | None:
        return (
            db.query(RecoveryLog)
            .filter_by(user_id=caller.user_id, status="in_progress")
            .order_by(RecoveryLog.id.desc())
            .first()
        )

    @staticmethod
    def detect_need(db: Session, caller: CallerContext) -> dict:
        """
        Report whether the caller needs a recovery. An open recovery is
        reported as-is. Otherwise the days since last activity decide, and
        the check itself counts as activity.
        """
        active = RecoveryService.get_active(db, caller)
        if active:
            return {
                "needs_recovery": True,
                "days_inactive": active.days_inactive,
                "suggested_phase": active.phase,
                "existing_recovery_id": active.id,
            }

        user = db.get(User, caller.user_id)
        last_active = user.last_active_at or user.created_at or utcnow()
        days = max(0, (utcnow() - _as_utc(last_active)).days)
        phase = suggested_phase(days)
        needs = days >= 3

        user.last_active_at = utcnow()
        user.recovery_status = "recovering" if needs else "active"
        user.updated_at = utcnow()
        commit(db)
        if needs:
            logger.info(f"User {caller.user_id} inactive for {days} days, suggesting {phase}")
        return {"needs_recovery": needs, "days_inactive": days, "suggested_phase": phase}

    @staticmethod
    def start(db: Session, caller: CallerContext, data: dict) -> RecoveryLog:
        check_choice("trigger_reason", data.get("trigger_reason"), TRIGGER_REASONS)
        check_choice("phase", data.get("phase"), PHASES)
        days = data.get("days_inactive") or 0
        if days < 0:
            raise ValidationError("days_inactive must not be negative")

        recovery = RecoveryLog(
            user_id=caller.user_id,
            status="in_progress",
            trigger_reason=data["trigger_reason"],
            days_inactive=days,
            phase=data["phase"],
            minimal_routine=data.get("minimal_routine"),
            recovery_streak=0,
        )
        db.add(recovery)
        commit(db)
        db.refresh(recovery)
        return recovery

    @staticmethod
    def advance_phase(db: Session, caller: CallerContext, recovery_id: int) -> dict:
        recovery = get_owned(db, RecoveryLog, recovery_id, caller, "Recovery")
        if recovery.status != "in_progress":
            raise ValidationError(f"Recovery is already {recovery.status}")

        idx = PHASES.index(recovery.phase)
        if idx < len(PHASES) - 1:
            recovery.phase = PHASES[idx + 1]
            recovery.recovery_streak = (recovery.recovery_streak or 0) + 1
            commit(db)
            return {"new_phase": recovery.phase, "completed": False}

        recovery.status = "completed"
        recovery.completed_at = utcnow()
        user = db.get(User, caller.user_id)
        user.recovery_status = "active"
        user.updated_at = utcnow()
        commit(db)

        GamificationService.award_xp(
            db, caller.user_id, COMEBACK_XP, "Completed recovery protocol. Welcome back!", source="comeback"
        )
        return {"new_phase": "full_momentum", "completed": True, "xp_gain": COMEBACK_XP}

    @staticmethod
    def update_notes(db: Session, caller: CallerContext, recovery_id: int, data: dict) -> RecoveryLog:
        recovery = get_owned(db, RecoveryLog, recovery_id, caller, "Recovery")
        if not data.get("notes"):
            raise ValidationError("notes is required")
        for field in ("notes", "adjusted_goals", "minimal_routine"):
            if field in data:
                setattr(recovery, field, data[field])
        commit(db)
        db.refresh(recovery)
        return recovery

    @staticmethod
    def list_history(db: Session, caller: CallerContext) -> list[RecoveryLog]:
        return (
            db.query(RecoveryLog)
            .filter(RecoveryLog.user_id == caller.user_id)
            .order_by(RecoveryLog.started_at.desc(), RecoveryLog.id.desc())
            .all()
        )
