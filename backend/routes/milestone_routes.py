from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Optional

from auth import CallerContext, get_caller
from database import get_db
from services.milestone_service import MilestoneService

router = APIRouter(prefix="/api/v1/milestones", tags=["Milestones"])

class MilestoneCreate(BaseModel):
    title: str
    sequence_order: int
    description: Optional[str] = None
    target_date: Optional[str] = None
    completion_criteria: Optional[Any] = None

class MilestoneBulk(BaseModel):
    milestones: list[MilestoneCreate]

class MilestoneUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    sequence_order: Optional[int] = None
    target_date: Optional[str] = None
    status: Optional[str] = None
    progress_percentage: Optional[int] = None
    completion_criteria: Optional[Any] = None

@router.get("/goal/{goal_id}")
def list_milestones(goal_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [m.to_dict() for m in MilestoneService.list_by_goal(db, caller, goal_id)]

@router.get("/goal/{goal_id}/next")
def next_milestone(goal_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    milestone = MilestoneService.next_for_goal(db, caller, goal_id)
    return milestone.to_dict() if milestone else None

@router.post("/goal/{goal_id}")
def create_milestone(goal_id: int, data: MilestoneCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    milestone = MilestoneService.create(db, caller, goal_id, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": milestone.to_dict()}

@router.post("/goal/{goal_id}/bulk")
def bulk_create_milestones(goal_id: int, data: MilestoneBulk, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    ids = MilestoneService.bulk_create(db, caller, goal_id, [m.model_dump(exclude_unset=True) for m in data.milestones])
    return {"status": "success", "data": {"milestone_ids": ids}}

@router.patch("/{milestone_id}")
def update_milestone(milestone_id: int, data: MilestoneUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    milestone = MilestoneService.update(db, caller, milestone_id, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": milestone.to_dict()}

@router.delete("/{milestone_id}")
def delete_milestone(milestone_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    MilestoneService.remove(db, caller, milestone_id)
    return {"status": "success"}
