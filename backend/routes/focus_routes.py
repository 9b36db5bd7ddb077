from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.focus_service import FocusService

router = APIRouter(prefix="/api/v1/focus-sessions", tags=["Focus"])

class SessionStart(BaseModel):
    type: str
    duration_minutes: int
    habit_id: Optional[int] = None
    task_id: Optional[int] = None

class SessionComplete(BaseModel):
    actual_minutes: Optional[int] = None
    focus_score: Optional[int] = None
    distraction_count: Optional[int] = None
    notes: Optional[str] = None

class SessionCancel(BaseModel):
    actual_minutes: Optional[int] = None
    reason: Optional[str] = None

class Distraction(BaseModel):
    description: Optional[str] = None

@router.post("")
def start_session(data: SessionStart, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    session = FocusService.start(db, caller, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": session.to_dict()}

@router.get("/today")
def todays_sessions(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [s.to_dict() for s in FocusService.today(db, caller)]

@router.get("/stats")
def focus_stats(days: Optional[int] = None, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return FocusService.stats(db, caller, days)

@router.get("/{session_id}")
def get_session(session_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return FocusService.get(db, caller, session_id).to_dict()

@router.post("/{session_id}/complete")
def complete_session(session_id: int, data: SessionComplete, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return FocusService.complete(db, caller, session_id, **data.model_dump(exclude_unset=True))

@router.post("/{session_id}/cancel")
def cancel_session(session_id: int, data: SessionCancel, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return FocusService.cancel(db, caller, session_id, **data.model_dump(exclude_unset=True))

@router.post("/{session_id}/distractions")
def log_distraction(session_id: int, data: Distraction, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    session = FocusService.log_distraction(db, caller, session_id, data.description)
    return {"status": "success", "data": session.to_dict()}
