from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.task_service import TaskService

router = APIRouter(prefix="/api/v1/tasks", tags=["Tasks"])

class Subtask(BaseModel):
    id: str
    title: str
    completed: bool = False

class TaskCreate(BaseModel):
    title: str
    priority: str
    description: Optional[str] = None
    notes: Optional[str] = None
    due_date: Optional[str] = None
    scheduled_date: Optional[str] = None
    estimated_minutes: Optional[int] = None
    tags: Optional[list[str]] = None
    subtasks: Optional[list[Subtask]] = None
    goal_id: Optional[int] = None
    milestone_id: Optional[int] = None
    habit_id: Optional[int] = None
    list_id: Optional[int] = None
    is_pinned: Optional[bool] = False

class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = None
    scheduled_date: Optional[str] = None
    estimated_minutes: Optional[int] = None
    actual_minutes: Optional[int] = None
    tags: Optional[list[str]] = None
    subtasks: Optional[list[Subtask]] = None
    goal_id: Optional[int] = None
    milestone_id: Optional[int] = None
    habit_id: Optional[int] = None
    list_id: Optional[int] = None
    is_pinned: Optional[bool] = None

class TaskListCreate(BaseModel):
    name: str
    color: Optional[str] = None
    icon: Optional[str] = None

class TaskBulkCreate(BaseModel):
    tasks: list[TaskCreate]

@router.get("")
def list_tasks(status: Optional[str] = None, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [t.to_dict() for t in TaskService.list(db, caller, status)]

@router.get("/stats")
def task_stats(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return TaskService.stats(db, caller)

@router.get("/pinned")
def pinned_tasks(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [t.to_dict() for t in TaskService.list_pinned(db, caller)]

@router.get("/by-date/{on_date}")
def tasks_by_date(on_date: str, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [t.to_dict() for t in TaskService.list_by_date(db, caller, on_date)]

@router.get("/goal/{goal_id}")
def tasks_by_goal(goal_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [t.to_dict() for t in TaskService.list_by_goal(db, caller, goal_id)]

@router.post("")
def create_task(task_data: TaskCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    task = TaskService.create(db, caller, task_data.model_dump(exclude_unset=True))
    return {"status": "success", "data": task.to_dict()}

@router.post("/bulk")
def bulk_create_tasks(data: TaskBulkCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    ids = TaskService.bulk_create(db, caller, [t.model_dump(exclude_unset=True) for t in data.tasks])
    return {"status": "success", "data": ids}

@router.get("/lists")
def task_lists(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [l.to_dict() for l in TaskService.get_lists(db, caller)]

@router.post("/lists")
def create_task_list(data: TaskListCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    task_list = TaskService.create_list(db, caller, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": task_list.to_dict()}

@router.get("/{task_id}")
def get_task(task_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return TaskService.get(db, caller, task_id).to_dict()

@router.patch("/{task_id}")
def update_task(task_id: int, task_data: TaskUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    task = TaskService.update(db, caller, task_id, task_data.model_dump(exclude_unset=True))
    return {"status": "success", "data": task.to_dict()}

@router.post("/{task_id}/toggle")
def toggle_task(task_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return TaskService.toggle_complete(db, caller, task_id)

@router.delete("/{task_id}")
def delete_task(task_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    TaskService.remove(db, caller, task_id)
    return {"status": "success"}
