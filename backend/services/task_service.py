"""
task_service.py — Task management
CRUD for tasks, subtask validation, and the completion toggle that feeds
the XP ledger.
"""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from auth import CallerContext
from database import commit
from errors import ValidationError
from models.goal import Goal
from models.habit import Habit
from models.milestone import Milestone
from models.task import Task
from models.task_list import TaskList
from services.common import apply_updates, check_choice, check_links, get_owned, parse_date, utcnow
from services.gamification_service import GamificationService

PRIORITIES = ("low", "medium", "high", "urgent")
STATUSES = ("todo", "in_progress", "done")

UPDATABLE_FIELDS = {
    "title", "description", "notes", "priority", "status", "due_date", "scheduled_date",
    "estimated_minutes", "actual_minutes", "tags", "subtasks", "goal_id", "milestone_id",
    "habit_id", "list_id", "is_pinned",
}

LINKS = {
    "goal_id": (Goal, "Goal"),
    "milestone_id": (Milestone, "Milestone"),
    "habit_id": (Habit, "Habit"),
    "list_id": (TaskList, "Task list"),
}


def task_xp(priority: str) -> int:
    if priority == "urgent":
        return 20
    if priority == "high":
        return 15
    return 10


def _validate_subtasks(subtasks) -> list[dict]:
    if not isinstance(subtasks, list):
        raise ValidationError("subtasks must be a list")
    cleaned = []
    for item in subtasks:
        if not isinstance(item, dict) or not item.get("id") or not item.get("title"):
            raise ValidationError("Each subtask needs an id and a title")
        cleaned.append({"id": str(item["id"]), "title": item["title"], "completed": bool(item.get("completed", False))})
    return cleaned


def _validate(data: dict) -> None:
    if data.get("priority") is not None:
        check_choice("priority", data["priority"], PRIORITIES)
    if data.get("status") is not None:
        check_choice("status", data["status"], STATUSES)
    for field in ("due_date", "scheduled_date"):
        if field in data:
            data[field] = parse_date(data[field], field)
    if data.get("subtasks") is not None:
        data["subtasks"] = _validate_subtasks(data["subtasks"])


class TaskService:
    @staticmethod
    def _build(db: Session, caller: CallerContext, data: dict) -> Task:
        if not data.get("title"):
            raise ValidationError("title is required")
        if not data.get("priority"):
            raise ValidationError("priority is required")
        _validate(data)
        check_links(db, caller, data, LINKS)
        return Task(
            user_id=caller.user_id,
            list_id=data.get("list_id"),
            habit_id=data.get("habit_id"),
            goal_id=data.get("goal_id"),
            milestone_id=data.get("milestone_id"),
            title=data["title"],
            description=data.get("description"),
            notes=data.get("notes"),
            priority=data["priority"],
            status="todo",
            due_date=data.get("due_date"),
            scheduled_date=data.get("scheduled_date"),
            estimated_minutes=data.get("estimated_minutes"),
            tags=data.get("tags"),
            subtasks=data.get("subtasks") or [],
            is_pinned=bool(data.get("is_pinned", False)),
        )

    @staticmethod
    def create(db: Session, caller: CallerContext, data: dict) -> Task:
        task = TaskService._build(db, caller, data)
        db.add(task)
        commit(db)
        db.refresh(task)
        return task

    @staticmethod
    def bulk_create(db: Session, caller: CallerContext, items: list[dict]) -> list[int]:
        """
        Insert a batch of tasks in one commit and return their ids in input
        order. Any invalid item rejects the whole batch.
        """
        tasks = [TaskService._build(db, caller, dict(item)) for item in items]
        db.add_all(tasks)
        commit(db)
        return [t.id for t in tasks]

    @staticmethod
    def create_list(db: Session, caller: CallerContext, data: dict) -> TaskList:
        if not data.get("name"):
            raise ValidationError("name is required")
        count = db.query(TaskList).filter_by(user_id=caller.user_id).count()
        task_list = TaskList(
            user_id=caller.user_id,
            name=data["name"],
            color=data.get("color"),
            icon=data.get("icon"),
            order=count,
        )
        db.add(task_list)
        commit(db)
        db.refresh(task_list)
        return task_list

    @staticmethod
    def get_lists(db: Session, caller: CallerContext) -> list[TaskList]:
        return (
            db.query(TaskList)
            .filter_by(user_id=caller.user_id)
            .order_by(TaskList.order, TaskList.id)
            .all()
        )

    @staticmethod
    def list_by_goal(db: Session, caller: CallerContext, goal_id: int) -> list[Task]:
        return db.query(Task).filter_by(user_id=caller.user_id, goal_id=goal_id).all()

    @staticmethod
    def list_by_date(db: Session, caller: CallerContext, on_date) -> list[Task]:
        d = parse_date(on_date)
        return (
            db.query(Task)
            .filter(Task.user_id == caller.user_id, or_(Task.scheduled_date == d, Task.due_date == d))
            .all()
        )

    @staticmethod
    def list_pinned(db: Session, caller: CallerContext) -> list[Task]:
        return db.query(Task).filter_by(user_id=caller.user_id, status="todo", is_pinned=True).all()

    @staticmethod
    def get(db: Session, caller: CallerContext, task_id: int) -> Task:
        return get_owned(db, Task, task_id, caller, "Task")

    @staticmethod
    def toggle_complete(db: Session, caller: CallerContext, task_id: int) -> dict:
        """
        done -> todo clears completed_at; anything else -> done stamps it and
        awards XP by priority. XP from an earlier completion is kept on undo.
        """
        task = get_owned(db, Task, task_id, caller, "Task")
        new_status = "todo" if task.status == "done" else "done"
        task.status = new_status
        task.completed_at = utcnow() if new_status == "done" else None
        task.updated_at = utcnow()
        priority, title = task.priority, task.title
        commit(db)

        result = {"status": new_status}
        if new_status == "done":
            xp_gain = task_xp(priority)
            GamificationService.award_xp(db, caller.user_id, xp_gain, f"Completed: {title}", source="task_complete")
            result["xp_gain"] = xp_gain
        return result

    @staticmethod
    def update(db: Session, caller: CallerContext, task_id: int, data: dict) -> Task:
        task = get_owned(db, Task, task_id, caller, "Task")
        _validate(data)
        check_links(db, caller, data, LINKS)
        apply_updates(task, data, UPDATABLE_FIELDS, required={"is_pinned"})
        if "status" in data:
            if task.status == "done" and not task.completed_at:
                task.completed_at = utcnow()
            elif task.status != "done":
                task.completed_at = None
        commit(db)
        db.refresh(task)
        return task

    @staticmethod
    def remove(db: Session, caller: CallerContext, task_id: int) -> None:
        task = get_owned(db, Task, task_id, caller, "Task")
        db.delete(task)
        commit(db)

    @staticmethod
    def stats(db: Session, caller: CallerContext) -> dict:
        tasks = db.query(Task).filter_by(user_id=caller.user_id).all()
        counts = {status: 0 for status in STATUSES}
        for t in tasks:
            counts[t.status] = counts.get(t.status, 0) + 1
        return {"total": len(tasks), **counts}

    @staticmethod
    def list(db: Session, caller: CallerContext, status: str | None = None) -> list[Task]:
        query = db.query(Task).filter(Task.user_id == caller.user_id)
        if status:
            check_choice("status", status, STATUSES)
            query = query.filter(Task.status == status)
        return query.order_by(Task.created_at.desc(), Task.id.desc()).all()
