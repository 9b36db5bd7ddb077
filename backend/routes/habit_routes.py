from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.habit_service import HabitService

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])

class HabitCreate(BaseModel):
    title: str
    category: str
    description: Optional[str] = None
    frequency: Optional[str] = "daily"
    custom_days: Optional[list[int]] = None
    time_of_day: Optional[str] = "anytime"
    identity_label: Optional[str] = None
    goal_id: Optional[int] = None
    estimated_minutes: Optional[int] = None
    color: Optional[str] = None
    icon: Optional[str] = None

class HabitUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    frequency: Optional[str] = None
    custom_days: Optional[list[int]] = None
    time_of_day: Optional[str] = None
    identity_label: Optional[str] = None
    is_active: Optional[bool] = None
    estimated_minutes: Optional[int] = None
    color: Optional[str] = None
    icon: Optional[str] = None

class HabitToggle(BaseModel):
    date: str
    mood: Optional[int] = None
    note: Optional[str] = None

class HabitSkip(BaseModel):
    date: str

@router.get("")
def list_active_habits(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [h.to_dict() for h in HabitService.list_active(db, caller)]

@router.get("/all")
def list_all_habits(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [h.to_dict() for h in HabitService.list_all(db, caller)]

@router.get("/logs")
def habit_logs(start_date: str, end_date: str, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [log.to_dict() for log in HabitService.logs_for_range(db, caller, start_date, end_date)]

@router.post("")
def create_habit(habit_data: HabitCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    habit = HabitService.create(db, caller, habit_data.model_dump(exclude_unset=True))
    return {"status": "success", "data": habit.to_dict()}

@router.get("/{habit_id}")
def get_habit(habit_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return HabitService.get(db, caller, habit_id).to_dict()

@router.patch("/{habit_id}")
def update_habit(habit_id: int, habit_data: HabitUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    habit = HabitService.update(db, caller, habit_id, habit_data.model_dump(exclude_unset=True))
    return {"status": "success", "data": habit.to_dict()}

@router.delete("/{habit_id}")
def delete_habit(habit_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    HabitService.remove(db, caller, habit_id)
    return {"status": "success"}

@router.post("/{habit_id}/toggle")
def toggle_habit(habit_id: int, data: HabitToggle, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return HabitService.toggle_complete(db, caller, habit_id, data.date, data.mood, data.note)

@router.post("/{habit_id}/skip")
def skip_habit(habit_id: int, data: HabitSkip, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return HabitService.skip(db, caller, habit_id, data.date)
