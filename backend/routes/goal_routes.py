from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Any, Optional

from auth import CallerContext, get_caller
from database import get_db
from services.goal_service import GoalService

router = APIRouter(prefix="/api/v1/goals", tags=["Goals"])

class GoalCreate(BaseModel):
    title: str
    category: str
    description: Optional[str] = None
    target_date: Optional[str] = None
    start_date: Optional[str] = None
    goal_type: Optional[str] = None
    life_domain: Optional[str] = None
    deadline_type: Optional[str] = None
    difficulty_level: Optional[int] = None
    estimated_hours: Optional[float] = None
    target_value: Optional[float] = None
    unit: Optional[str] = None
    why_important: Optional[str] = None
    parent_goal_id: Optional[int] = None
    tags: Optional[list[str]] = None
    icon: Optional[str] = None
    color: Optional[str] = None

class GoalUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = None
    target_date: Optional[str] = None
    goal_type: Optional[str] = None
    life_domain: Optional[str] = None
    deadline_type: Optional[str] = None
    difficulty_level: Optional[int] = None
    estimated_hours: Optional[float] = None
    target_value: Optional[float] = None
    unit: Optional[str] = None
    why_important: Optional[str] = None
    tags: Optional[list[str]] = None
    icon: Optional[str] = None
    color: Optional[str] = None

class AIPlan(BaseModel):
    ai_plan: Any
    ai_confidence_score: Optional[float] = None

class ProgressUpdate(BaseModel):
    current_value: float

@router.get("")
def list_active_goals(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [g.to_dict() for g in GoalService.list_active(db, caller)]

@router.get("/all")
def list_all_goals(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [g.to_dict() for g in GoalService.list_all(db, caller)]

@router.get("/domain/{life_domain}")
def list_goals_by_domain(life_domain: str, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [g.to_dict() for g in GoalService.list_by_domain(db, caller, life_domain)]

@router.post("")
def create_goal(goal_data: GoalCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    goal = GoalService.create(db, caller, goal_data.model_dump(exclude_unset=True))
    return {"status": "success", "data": goal.to_dict()}

@router.get("/{goal_id}")
def get_goal(goal_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return GoalService.get(db, caller, goal_id).to_dict()

@router.patch("/{goal_id}")
def update_goal(goal_id: int, goal_data: GoalUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    goal = GoalService.update(db, caller, goal_id, goal_data.model_dump(exclude_unset=True))
    return {"status": "success", "data": goal.to_dict()}

@router.put("/{goal_id}/ai-plan")
def store_ai_plan(goal_id: int, data: AIPlan, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    goal = GoalService.store_ai_plan(db, caller, goal_id, data.ai_plan, data.ai_confidence_score)
    return {"status": "success", "data": goal.to_dict()}

@router.put("/{goal_id}/progress")
def update_progress(goal_id: int, data: ProgressUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    goal = GoalService.update_progress(db, caller, goal_id, data.current_value)
    return {"status": "success", "data": goal.to_dict()}

@router.delete("/{goal_id}")
def delete_goal(goal_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    GoalService.remove(db, caller, goal_id)
    return {"status": "success"}
