from datetime import date

import pytest

from errors import NotFound, TemplateInstantiationError, ValidationError
from models.goal import Goal
from models.goal_template import GoalTemplate
from models.habit import Habit
from models.milestone import Milestone
from services.template_service import TemplateService, normalize_frequency


@pytest.fixture
def template(db):
    template = GoalTemplate(
        title="Run a half marathon",
        description="From couch to 21k",
        category="fitness",
        life_domain="health",
        goal_type="achievement",
        estimated_weeks=8,
        difficulty_level=3,
        milestones=[
            {"title": "Race day", "description": None, "week_number": 8},
            {"title": "Run 5k", "description": "Easy pace", "week_number": 2},
            {"title": "Run 10k", "week_number": 4},
        ],
        suggested_habits=[
            {"title": "Morning run", "frequency": "3x per week", "estimated_minutes": 40},
            {"title": "Stretch", "frequency": "Daily", "estimated_minutes": 10},
            {"title": "Foam roll", "frequency": "twice a month", "estimated_minutes": 15},
        ],
        icon="🏃",
        is_public=True,
    )
    db.add(template)
    db.commit()
    return template


@pytest.mark.parametrize("raw, expected", [
    ("daily", "daily"),
    ("weekdays", "weekdays"),
    ("weekly", "weekly"),
    ("3x per week", "3x_week"),
    ("3x_week", "3x_week"),
    ("every full moon", "daily"),
    ("WEEKLY", "daily"),
    (" weekly ", "daily"),
    (None, "daily"),
])
def test_normalize_frequency(raw, expected):
    assert normalize_frequency(raw) == expected


def test_use_template_back_calculates_dates(db, caller, template):
    result = TemplateService.use_template(db, caller, template.id, "2026-06-01")

    goal = db.get(Goal, result["goal_id"])
    assert goal.user_id == caller.user_id
    assert goal.title == "Run a half marathon"
    assert goal.status == "in_progress"
    assert goal.progress == 0
    assert goal.estimated_hours == 40
    assert goal.decomposition_status == "completed"
    assert goal.progress_type == "milestones"
    assert goal.life_domain == "health"

    milestones = [db.get(Milestone, mid) for mid in result["milestone_ids"]]
    assert [(m.sequence_order, m.target_date) for m in milestones] == [
        (2, date(2026, 4, 20)),
        (4, date(2026, 5, 4)),
        (8, date(2026, 6, 1)),
    ]
    assert all(m.status == "not_started" and m.progress_percentage == 0 for m in milestones)

    habits = [db.get(Habit, hid) for hid in result["habit_ids"]]
    assert [h.frequency for h in habits] == ["3x_week", "daily", "daily"]
    assert all(h.category == "fitness" and h.time_of_day == "anytime" for h in habits)
    assert all(h.is_active and h.streak_current == 0 and h.goal_id == goal.id for h in habits)

    assert db.query(Goal).count() == 1
    assert db.query(Milestone).count() == 3
    assert db.query(Habit).count() == 3
    assert db.get(GoalTemplate, template.id).usage_count == 1


def test_use_template_without_target_date(db, caller, template):
    result = TemplateService.use_template(db, caller, template.id)
    assert all(db.get(Milestone, mid).target_date is None for mid in result["milestone_ids"])


def test_usage_count_treats_missing_as_zero(db, caller, template):
    template.usage_count = None
    db.commit()
    TemplateService.use_template(db, caller, template.id)
    TemplateService.use_template(db, caller, template.id)
    assert db.get(GoalTemplate, template.id).usage_count == 2


def test_unknown_template(db, caller):
    with pytest.raises(NotFound):
        TemplateService.use_template(db, caller, 404)


def test_failure_rolls_back_everything(db, caller, template, monkeypatch):
    def broken_habit(**kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr("services.template_service.Habit", broken_habit)
    with pytest.raises(TemplateInstantiationError) as exc:
        TemplateService.use_template(db, caller, template.id, "2026-06-01")

    report = exc.value.report
    assert report["goal_id"] is not None
    assert len(report["milestone_ids"]) == 3
    assert report["habit_ids"] == []
    assert not report["usage_count_incremented"]
    assert exc.value.status_code == 503

    assert db.query(Goal).count() == 0
    assert db.query(Milestone).count() == 0
    assert db.get(GoalTemplate, template.id).usage_count == 0


def test_list_public_and_create(db, caller, template):
    private = TemplateService.create(db, caller, {
        "title": "Read 12 books",
        "category": "reading",
        "life_domain": "learning",
        "goal_type": "quantitative",
        "estimated_weeks": 52,
        "difficulty_level": 2,
        "milestones": [{"title": "Book 6", "week_number": 26}],
    })
    assert private.created_by == caller.user_id
    assert not private.is_public
    assert private.usage_count == 0
    assert private.suggested_habits is None

    assert [t.id for t in TemplateService.list_public(db)] == [template.id]
    assert TemplateService.list_public(db, category="reading") == []
    assert [t.id for t in TemplateService.list_public(db, life_domain="health")] == [template.id]

    # any caller may instantiate a template by id, public or not
    result = TemplateService.use_template(db, caller, private.id)
    assert len(result["milestone_ids"]) == 1


def test_create_validates(db, caller):
    with pytest.raises(ValidationError):
        TemplateService.create(db, caller, {
            "title": "Bad", "category": "x", "life_domain": "space", "goal_type": "skill",
            "estimated_weeks": 4, "difficulty_level": 1,
        })
    with pytest.raises(ValidationError):
        TemplateService.create(db, caller, {
            "title": "Bad", "category": "x", "life_domain": "health", "goal_type": "skill",
            "estimated_weeks": 4, "difficulty_level": 1, "milestones": [{"title": "no week"}],
        })


@pytest.mark.parametrize("week", [0, 5, -1])
def test_create_rejects_milestone_week_outside_template(db, caller, week):
    with pytest.raises(ValidationError, match="week_number"):
        TemplateService.create(db, caller, {
            "title": "Learn guitar", "category": "music", "life_domain": "creativity", "goal_type": "skill",
            "estimated_weeks": 4, "difficulty_level": 2,
            "milestones": [{"title": "First chords", "week_number": 1}, {"title": "Stray", "week_number": week}],
        })
    assert db.query(GoalTemplate).count() == 0


def test_create_accepts_milestones_on_first_and_last_week(db, caller):
    template = TemplateService.create(db, caller, {
        "title": "Learn guitar", "category": "music", "life_domain": "creativity", "goal_type": "skill",
        "estimated_weeks": 4, "difficulty_level": 2,
        "milestones": [{"title": "First chords", "week_number": 1}, {"title": "First song", "week_number": 4}],
    })
    assert [m["week_number"] for m in template.milestones] == [1, 4]
