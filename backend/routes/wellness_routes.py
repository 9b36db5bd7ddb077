from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.wellness_service import WellnessService

router = APIRouter(prefix="/api/v1/wellness", tags=["Wellness"])

class MoodLog(BaseModel):
    date: str
    score: int
    notes: Optional[str] = None
    tags: Optional[list[str]] = None

class JournalCreate(BaseModel):
    date: str
    content: str
    type: Optional[str] = "freeform"
    habit_log_id: Optional[int] = None
    goal_id: Optional[int] = None

@router.post("/mood")
def log_mood(data: MoodLog, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    entry = WellnessService.log_mood(db, caller, data.date, data.score, data.notes, data.tags)
    return {"status": "success", "data": entry.to_dict()}

@router.get("/mood")
def mood_history(days: Optional[int] = None, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [e.to_dict() for e in WellnessService.mood_history(db, caller, days)]

@router.post("/journal")
def create_journal_entry(data: JournalCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    entry = WellnessService.create_journal_entry(db, caller, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": entry.to_dict()}

@router.get("/journal")
def journal_entries(limit: Optional[int] = None, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [e.to_dict() for e in WellnessService.journal_entries(db, caller, limit)]
