from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.habit_stack_service import HabitStackService

router = APIRouter(prefix="/api/v1/habit-stacks", tags=["Habit Stacks"])

class StackCreate(BaseModel):
    name: str
    habit_ids: list[int]

class StackUpdate(BaseModel):
    name: Optional[str] = None
    habit_ids: Optional[list[int]] = None

@router.get("")
def list_stacks(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [s.to_dict() for s in HabitStackService.list(db, caller)]

@router.post("")
def create_stack(data: StackCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    stack = HabitStackService.create(db, caller, data.name, data.habit_ids)
    return {"status": "success", "data": stack.to_dict()}

@router.patch("/{stack_id}")
def update_stack(stack_id: int, data: StackUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    stack = HabitStackService.update(db, caller, stack_id, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": stack.to_dict()}

@router.delete("/{stack_id}")
def delete_stack(stack_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    HabitStackService.remove(db, caller, stack_id)
    return {"status": "success"}
