"""
user_service.py — Internal user records
Syncs identity-provider subjects into users, manages profile fields and the
billing plan.
"""

import logging

from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import NotFound
from models.user import User
from plans import PLANS
from services.common import apply_updates, check_choice, utcnow
from services.gamification_service import GamificationService

logger = logging.getLogger(__name__)

THEMES = ("light", "dark", "system")


class UserService:
    @staticmethod
    def store(db: Session, identity: dict) -> User:
        """Upsert the user for an identity; new users also get a zero-state gamification profile."""
        external_id = identity["sub"]
        user = db.query(User).filter_by(external_id=external_id).first()
        if user:
            user.name = identity.get("name") or user.name
            user.email = identity.get("email") or user.email
            user.image_url = identity.get("picture") or user.image_url
            user.updated_at = utcnow()
            commit(db)
            db.refresh(user)
            return user

        user = User(
            external_id=external_id,
            email=identity.get("email") or "",
            name=identity.get("name") or "User",
            image_url=identity.get("picture"),
            plan="free",
            onboarding_complete=False,
            streak_freeze_count=1,
        )
        db.add(user)
        db.flush()
        GamificationService.create_profile(db, user.id)
        commit(db)
        db.refresh(user)
        logger.info(f"Created user {user.id} for subject {external_id}")
        return user

    @staticmethod
    def current(db: Session, caller: CallerContext) -> User:
        user = db.get(User, caller.user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    @staticmethod
    def update_profile(db: Session, caller: CallerContext, data: dict) -> User:
        user = UserService.current(db, caller)
        if data.get("theme") is not None:
            check_choice("theme", data["theme"], THEMES)
        apply_updates(user, data, {"name", "timezone", "theme"})
        commit(db)
        db.refresh(user)
        return user

    @staticmethod
    def complete_onboarding(db: Session, caller: CallerContext) -> User:
        user = UserService.current(db, caller)
        user.onboarding_complete = True
        user.updated_at = utcnow()
        commit(db)
        db.refresh(user)
        return user

    @staticmethod
    def update_plan(db: Session, external_id: str, plan: str) -> User:
        """Internal only — invoked by billing glue, never by end-user clients."""
        check_choice("plan", plan, PLANS)
        user = db.query(User).filter_by(external_id=external_id).first()
        if user is None:
            raise NotFound(f"User not found for subject: {external_id}")
        user.plan = plan
        user.updated_at = utcnow()
        commit(db)
        db.refresh(user)
        logger.info(f"User {user.id} moved to plan {plan}")
        return user
