from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.daily_plan_service import DailyPlanService, TimeBlock

router = APIRouter(prefix="/api/v1/daily-plans", tags=["Daily Plans"])

class MorningIntention(BaseModel):
    intention: str
    top_priorities: Optional[list[str]] = None

class TimeBlocksUpdate(BaseModel):
    time_blocks: list[TimeBlock]

class EveningReflection(BaseModel):
    reflection: Optional[str] = None
    gratitude: Optional[list[str]] = None
    tomorrow_plan: Optional[str] = None
    day_rating: Optional[int] = None

class DailyScore(BaseModel):
    daily_score: int
    tasks_completed_count: Optional[int] = None
    tasks_total_count: Optional[int] = None
    habits_completed_count: Optional[int] = None
    habits_total_count: Optional[int] = None
    focus_minutes: Optional[int] = None

@router.get("")
def list_recent(days: Optional[int] = None, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [p.to_dict() for p in DailyPlanService.list_recent(db, caller, days)]

@router.post("/{on_date}")
def get_or_create(on_date: str, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return {"status": "success", "data": DailyPlanService.get_or_create(db, caller, on_date).to_dict()}

@router.get("/{on_date}")
def get_by_date(on_date: str, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    plan = DailyPlanService.get_by_date(db, caller, on_date)
    return plan.to_dict() if plan else None

@router.post("/{plan_id}/morning")
def set_morning_intention(plan_id: int, data: MorningIntention, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    plan = DailyPlanService.set_morning_intention(db, caller, plan_id, data.intention, data.top_priorities)
    return {"status": "success", "data": plan.to_dict()}

@router.put("/{plan_id}/time-blocks")
def update_time_blocks(plan_id: int, data: TimeBlocksUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    blocks = [b.model_dump() for b in data.time_blocks]
    plan = DailyPlanService.update_time_blocks(db, caller, plan_id, blocks)
    return {"status": "success", "data": plan.to_dict()}

@router.post("/{plan_id}/evening")
def set_evening_reflection(plan_id: int, data: EveningReflection, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    plan = DailyPlanService.set_evening_reflection(db, caller, plan_id, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": plan.to_dict()}

@router.post("/{plan_id}/score")
def update_daily_score(plan_id: int, data: DailyScore, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    plan = DailyPlanService.update_daily_score(db, caller, plan_id, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": plan.to_dict()}
