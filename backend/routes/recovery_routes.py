from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.recovery_service import RecoveryService

router = APIRouter(prefix="/api/v1/recovery", tags=["Recovery"])

class RecoveryStart(BaseModel):
    trigger_reason: str
    days_inactive: int = 0
    phase: str
    minimal_routine: Optional[list[str]] = None

class RecoveryNotes(BaseModel):
    notes: str
    adjusted_goals: Optional[list[str]] = None
    minimal_routine: Optional[list[str]] = None

@router.post("/detect")
def detect_need(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return RecoveryService.detect_need(db, caller)

@router.get("/active")
def get_active(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    recovery = RecoveryService.get_active(db, caller)
    return recovery.to_dict() if recovery else None

@router.get("")
def list_history(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [r.to_dict() for r in RecoveryService.list_history(db, caller)]

@router.post("")
def start_recovery(data: RecoveryStart, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    recovery = RecoveryService.start(db, caller, data.model_dump())
    return {"status": "success", "data": recovery.to_dict()}

@router.post("/{recovery_id}/advance")
def advance_phase(recovery_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return RecoveryService.advance_phase(db, caller, recovery_id)

@router.patch("/{recovery_id}/notes")
def update_notes(recovery_id: int, data: RecoveryNotes, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    recovery = RecoveryService.update_notes(db, caller, recovery_id, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": recovery.to_dict()}
