"""
gamification_service.py — XP ledger, levels and achievements
One profile row per user, written only through award_xp and
unlock_achievement. Both go through a versioned read-modify-write that is
retried when another writer got there first, so concurrent awards never
lose XP.
"""

import logging
import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from auth import CallerContext
from config import AWARD_MAX_RETRIES
from errors import UpstreamFailure, ValidationError
from models.gamification import GamificationProfile, XPEvent
from services.common import utcnow
from services.leveling import level_for, level_name, level_progress

logger = logging.getLogger(__name__)

XP_SOURCES = (
    "task_complete", "habit_complete", "milestone_complete", "focus_session", "morning_intention",
    "evening_reflection", "perfect_day", "weekly_review", "comeback", "other",
)

ZERO_PROFILE = {
    "total_xp": 0,
    "level": 1,
    "level_name": "Seed",
    "achievements": [],
    "badges": [],
    "xp_to_next_level": 100,
    "xp_progress": 0,
}


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class GamificationService:
    @staticmethod
    def create_profile(db: Session, user_id: int) -> GamificationProfile:
        """Add a zero-state profile to the session. The caller commits."""
        profile = GamificationProfile(user_id=user_id, total_xp=0, level=1, achievements=[], badges=[])
        db.add(profile)
        return profile

    @staticmethod
    def _load_profile(db: Session, user_id: int) -> GamificationProfile | None:
        return (
            db.query(GamificationProfile)
            .filter_by(user_id=user_id)
            .populate_existing()
            .first()
        )

    @staticmethod
    def _update_profile(db: Session, user_id: int, mutate):
        """
        Run mutate(profile) and commit, retrying on a version conflict.
        mutate returns None to signal "nothing to write".
        """
        for attempt in range(1, AWARD_MAX_RETRIES + 1):
            profile = GamificationService._load_profile(db, user_id)
            if profile is None:
                return None

            result = mutate(profile)
            if result is None:
                return None

            profile.updated_at = utcnow()
            try:
                db.commit()
            except StaleDataError:
                db.rollback()
                logger.warning(f"Gamification profile conflict for user {user_id}, retry {attempt}/{AWARD_MAX_RETRIES}")
                continue
            except SQLAlchemyError as e:
                db.rollback()
                raise UpstreamFailure(f"Datastore operation failed: {e.__class__.__name__}") from e
            return result

        raise UpstreamFailure(f"Could not update gamification profile after {AWARD_MAX_RETRIES} attempts")

    @staticmethod
    def get_profile(db: Session, caller: CallerContext) -> dict:
        profile = db.query(GamificationProfile).filter_by(user_id=caller.user_id).first()
        if profile is None:
            return dict(ZERO_PROFILE, achievements=[], badges=[])

        progress = level_progress(profile.total_xp)
        return {
            "total_xp": profile.total_xp,
            "level": progress["level"],
            "level_name": progress["level_name"],
            "achievements": list(profile.achievements or []),
            "badges": list(profile.badges or []),
            "xp_to_next_level": progress["xp_to_next_level"],
            "xp_progress": progress["xp_progress"],
        }

    @staticmethod
    def award_xp(db: Session, user_id: int, amount: int, reason: str, source: str = "other") -> dict | None:
        """
        Internal only. Add XP, recompute the level and append one
        "Reached <name>" achievement per level crossed.
        Returns None when the user has no profile.
        """
        if amount < 0:
            raise ValidationError("XP amount must not be negative")
        if source not in XP_SOURCES:
            source = "other"

        def mutate(profile: GamificationProfile) -> dict:
            old_level = profile.level or 1
            profile.total_xp = (profile.total_xp or 0) + amount
            new_level, new_name = level_for(profile.total_xp)
            profile.level = new_level

            if new_level > old_level:
                stamp = _timestamp_ms()
                unlocked_at = utcnow().isoformat()
                achievements = list(profile.achievements or [])
                for lvl in range(old_level + 1, new_level + 1):
                    achievements.append({
                        "id": f"level_{lvl}_{stamp}",
                        "name": f"Reached {level_name(lvl)}",
                        "description": f"Leveled up to Level {lvl}!",
                        "icon": "🎉",
                        "unlocked_at": unlocked_at,
                    })
                profile.achievements = achievements

            db.add(XPEvent(user_id=user_id, amount=amount, source=source, description=reason))
            return {
                "xp_gained": amount,
                "total_xp": profile.total_xp,
                "level": new_level,
                "level_name": new_name,
                "leveled_up": new_level > old_level,
            }

        result = GamificationService._update_profile(db, user_id, mutate)
        if result is None:
            logger.debug(f"No gamification profile for user {user_id}; skipped {amount} XP")
        elif result["leveled_up"]:
            logger.info(f"User {user_id} reached level {result['level']} ({result['level_name']})")
        return result

    @staticmethod
    def unlock_achievement(db: Session, user_id: int, name: str, description: str, icon: str) -> dict | None:
        """Append an achievement unless one with the same name exists. Returns it, or None on no-op."""

        def mutate(profile: GamificationProfile) -> dict | None:
            achievements = list(profile.achievements or [])
            if any(a.get("name") == name for a in achievements):
                return None
            achievement = {
                "id": f"ach_{_timestamp_ms()}",
                "name": name,
                "description": description,
                "icon": icon,
                "unlocked_at": utcnow().isoformat(),
            }
            profile.achievements = achievements + [achievement]
            return achievement

        return GamificationService._update_profile(db, user_id, mutate)

    @staticmethod
    def xp_history(db: Session, caller: CallerContext, limit: int | None = None) -> list[XPEvent]:
        query = (
            db.query(XPEvent)
            .filter_by(user_id=caller.user_id)
            .order_by(XPEvent.created_at.desc(), XPEvent.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()
