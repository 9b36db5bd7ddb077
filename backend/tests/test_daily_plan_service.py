from datetime import date

import pytest

from errors import NotFound, ValidationError
from models.gamification import XPEvent
from services.daily_plan_service import DailyPlanService
from services.gamification_service import GamificationService
from services.task_service import TaskService

DAY = "2026-05-04"


@pytest.fixture
def plan(db, caller):
    return DailyPlanService.get_or_create(db, caller, DAY)


def total_xp(db, caller):
    return GamificationService.get_profile(db, caller)["total_xp"]


def sources(db):
    return [e.source for e in db.query(XPEvent).order_by(XPEvent.id)]


def test_get_or_create_is_idempotent(db, caller, plan):
    assert plan.date == date(2026, 5, 4)
    assert plan.morning_completed_at is None
    again = DailyPlanService.get_or_create(db, caller, DAY)
    assert again.id == plan.id
    assert DailyPlanService.get_by_date(db, caller, DAY).id == plan.id
    assert DailyPlanService.get_by_date(db, caller, "2026-05-05") is None


def test_plans_are_owner_scoped(db, caller, other_caller, plan):
    assert DailyPlanService.get_by_date(db, other_caller, DAY) is None
    with pytest.raises(NotFound):
        DailyPlanService.set_morning_intention(db, other_caller, plan.id, "Steal the day")


def test_morning_intention_pays_once(db, caller, plan):
    plan = DailyPlanService.set_morning_intention(db, caller, plan.id, "Ship the draft", ["Draft", "Gym"])
    assert plan.intention == "Ship the draft"
    assert plan.top_priorities == ["Draft", "Gym"]
    assert plan.morning_completed_at is not None
    assert total_xp(db, caller) == 10

    DailyPlanService.set_morning_intention(db, caller, plan.id, "Ship the whole thing")
    assert total_xp(db, caller) == 10
    assert sources(db) == ["morning_intention"]


def test_evening_reflection_pays_once(db, caller, plan):
    plan = DailyPlanService.set_evening_reflection(db, caller, plan.id, {
        "reflection": "Good focus", "gratitude": ["Sun"], "tomorrow_plan": "Edit", "day_rating": 8,
    })
    assert (plan.reflection, plan.day_rating) == ("Good focus", 8)
    assert total_xp(db, caller) == 15

    plan = DailyPlanService.set_evening_reflection(db, caller, plan.id, {"day_rating": 9})
    assert plan.reflection == "Good focus"
    assert total_xp(db, caller) == 15
    assert sources(db) == ["evening_reflection"]


def test_evening_reflection_validates_rating(db, caller, plan):
    with pytest.raises(ValidationError):
        DailyPlanService.set_evening_reflection(db, caller, plan.id, {"day_rating": 11})
    assert total_xp(db, caller) == 0


def test_perfect_day_pays_when_score_crosses_threshold(db, caller, plan):
    DailyPlanService.update_daily_score(db, caller, plan.id, {"daily_score": 80, "tasks_completed_count": 4})
    assert total_xp(db, caller) == 0

    plan = DailyPlanService.update_daily_score(db, caller, plan.id, {"daily_score": 95})
    assert plan.daily_score == 95
    assert plan.tasks_completed_count == 4
    assert total_xp(db, caller) == 25

    DailyPlanService.update_daily_score(db, caller, plan.id, {"daily_score": 100})
    assert total_xp(db, caller) == 25
    assert sources(db) == ["perfect_day"]


def test_daily_score_range(db, caller, plan):
    with pytest.raises(ValidationError):
        DailyPlanService.update_daily_score(db, caller, plan.id, {"daily_score": 101})
    with pytest.raises(ValidationError):
        DailyPlanService.update_daily_score(db, caller, plan.id, {"daily_score": 50, "focus_minutes": -5})


def test_time_blocks(db, caller, other_caller, plan):
    task = TaskService.create(db, caller, {"title": "Write", "priority": "high"})
    plan = DailyPlanService.update_time_blocks(db, caller, plan.id, [
        {"id": "b1", "start_time": "09:00", "end_time": "10:30", "title": "Write", "type": "deep_work", "task_id": task.id},
        {"id": "b2", "start_time": "12:00", "end_time": "12:30", "title": "Lunch", "type": "break"},
    ])
    assert [b["id"] for b in plan.time_blocks] == ["b1", "b2"]
    assert plan.time_blocks[1] == {
        "id": "b2", "start_time": "12:00", "end_time": "12:30", "title": "Lunch",
        "type": "break", "task_id": None, "completed": False,
    }

    with pytest.raises(ValidationError):
        DailyPlanService.update_time_blocks(db, caller, plan.id, [
            {"id": "b3", "start_time": "13:00", "end_time": "14:00", "title": "Nap", "type": "siesta"},
        ])
    with pytest.raises(ValidationError):
        DailyPlanService.update_time_blocks(db, caller, plan.id, [{"id": "b4", "title": "No times"}])

    their_task = TaskService.create(db, other_caller, {"title": "Theirs", "priority": "low"})
    with pytest.raises(NotFound):
        DailyPlanService.update_time_blocks(db, caller, plan.id, [
            {"id": "b5", "start_time": "15:00", "end_time": "16:00", "title": "Theirs", "type": "meeting", "task_id": their_task.id},
        ])


def test_list_recent_newest_first(db, caller):
    for day in ("2026-05-01", "2026-05-03", "2026-05-02"):
        DailyPlanService.get_or_create(db, caller, day)
    assert [p.date.day for p in DailyPlanService.list_recent(db, caller)] == [3, 2, 1]
    assert len(DailyPlanService.list_recent(db, caller, days=2)) == 2
