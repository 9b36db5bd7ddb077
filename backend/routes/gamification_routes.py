from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.gamification_service import GamificationService

router = APIRouter(prefix="/api/v1/gamification", tags=["Gamification"])

class AchievementUnlock(BaseModel):
    name: str
    description: str
    icon: str

@router.get("/profile")
def get_profile(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return GamificationService.get_profile(db, caller)

@router.get("/history")
def xp_history(limit: Optional[int] = None, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [e.to_dict() for e in GamificationService.xp_history(db, caller, limit)]

@router.post("/achievements")
def unlock_achievement(data: AchievementUnlock, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    achievement = GamificationService.unlock_achievement(db, caller.user_id, data.name, data.description, data.icon)
    return {"status": "success" if achievement else "unchanged", "data": achievement}
