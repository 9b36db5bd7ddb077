from auth import create_token
from conftest import auth_headers


def signup(client, sub="idp|alice"):
    headers = auth_headers(sub, email=f"{sub}@example.com", name="Alice")
    response = client.post("/api/v1/users/store", headers=headers)
    assert response.status_code == 200
    return headers


def test_health_check(client):
    response = client.get("/api/v1/health-check")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_missing_token(client):
    response = client.get("/api/v1/goals")
    assert response.status_code == 401
    assert response.json() == {"kind": "unauthenticated", "detail": "Missing or invalid Authorization header"}


def test_bad_token(client):
    response = client.get("/api/v1/goals", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["kind"] == "unauthenticated"


def test_token_without_subject(client):
    headers = {"Authorization": f"Bearer {create_token({'email': 'x@example.com'})}"}
    response = client.get("/api/v1/goals", headers=headers)
    assert response.status_code == 401
    assert response.json()["detail"] == "Token payload missing subject claim"


def test_unknown_subject_must_sign_up(client):
    response = client.get("/api/v1/goals", headers=auth_headers("idp|stranger"))
    assert response.status_code == 401


def test_signup_and_profile(client):
    headers = signup(client)
    me = client.get("/api/v1/users/me", headers=headers).json()
    assert me["plan"] == "free"
    assert me["name"] == "Alice"

    profile = client.get("/api/v1/gamification/profile", headers=headers).json()
    assert profile["level_name"] == "Seed"
    assert profile["xp_to_next_level"] == 100

    limits = client.get("/api/v1/plans/limits", headers=headers).json()
    assert limits["limits"]["max_goals"] == 1


def test_goal_plan_limit_error_shape(client):
    headers = signup(client)
    created = client.post("/api/v1/goals", json={"title": "Run", "category": "fitness"}, headers=headers)
    assert created.status_code == 200
    assert created.json()["data"]["status"] == "in_progress"

    blocked = client.post("/api/v1/goals", json={"title": "Read", "category": "learning"}, headers=headers)
    assert blocked.status_code == 403
    assert blocked.json()["kind"] == "plan_limit_exceeded"


def test_request_schema_errors_use_validation_kind(client):
    headers = signup(client)
    response = client.post("/api/v1/tasks", json={"title": "No priority"}, headers=headers)
    assert response.status_code == 422
    assert response.json()["kind"] == "validation_error"
    assert "priority" in response.json()["detail"]


def test_service_validation_error(client):
    headers = signup(client)
    response = client.post("/api/v1/tasks", json={"title": "x", "priority": "someday"}, headers=headers)
    assert response.status_code == 422
    assert response.json()["kind"] == "validation_error"


def test_task_toggle_awards_xp(client):
    headers = signup(client)
    task = client.post("/api/v1/tasks", json={"title": "File taxes", "priority": "urgent"}, headers=headers).json()["data"]

    toggled = client.post(f"/api/v1/tasks/{task['id']}/toggle", headers=headers).json()
    assert toggled == {"status": "done", "xp_gain": 20}

    profile = client.get("/api/v1/gamification/profile", headers=headers).json()
    assert profile["total_xp"] == 20
    history = client.get("/api/v1/gamification/history", headers=headers).json()
    assert history[0]["source"] == "task_complete"


def test_other_users_entities_are_not_found(client):
    alice = signup(client, "idp|alice")
    bob = signup(client, "idp|bob")
    task = client.post("/api/v1/tasks", json={"title": "Private", "priority": "low"}, headers=alice).json()["data"]

    response = client.patch(f"/api/v1/tasks/{task['id']}", json={"title": "Mine now"}, headers=bob)
    assert response.status_code == 404
    assert response.json() == {"kind": "not_found", "detail": "Task not found"}


def test_habit_toggle_and_focus_flow(client):
    headers = signup(client)
    habit = client.post("/api/v1/habits", json={"title": "Walk", "category": "health"}, headers=headers).json()["data"]
    toggled = client.post(f"/api/v1/habits/{habit['id']}/toggle", json={"date": "2026-04-01"}, headers=headers).json()
    assert toggled["xp_gain"] == 10

    session = client.post(
        "/api/v1/focus-sessions", json={"type": "deep_work", "duration_minutes": 50}, headers=headers,
    ).json()["data"]
    done = client.post(f"/api/v1/focus-sessions/{session['id']}/complete", json={"actual_minutes": 43}, headers=headers)
    assert done.json() == {"xp_gain": 27}

    assert client.get("/api/v1/gamification/profile", headers=headers).json()["total_xp"] == 37


def test_template_round_trip(client):
    headers = signup(client)
    created = client.post("/api/v1/goal-templates", json={
        "title": "Learn guitar",
        "category": "music",
        "life_domain": "creativity",
        "goal_type": "skill",
        "estimated_weeks": 4,
        "difficulty_level": 2,
        "milestones": [{"title": "First chords", "week_number": 1}, {"title": "First song", "week_number": 4}],
        "suggested_habits": [{"title": "Practice", "frequency": "weekdays", "estimated_minutes": 20}],
        "is_public": True,
    }, headers=headers)
    template = created.json()["data"]

    listed = client.get("/api/v1/goal-templates", params={"life_domain": "creativity"}, headers=headers).json()
    assert [t["id"] for t in listed] == [template["id"]]

    used = client.post(f"/api/v1/goal-templates/{template['id']}/use", json={"target_date": "2026-09-30"}, headers=headers)
    assert used.status_code == 200
    data = used.json()["data"]
    assert len(data["milestone_ids"]) == 2
    assert len(data["habit_ids"]) == 1

    milestones = client.get(f"/api/v1/milestones/goal/{data['goal_id']}", headers=headers).json()
    assert [m["target_date"] for m in milestones] == ["2026-09-09", "2026-09-30"]


def test_null_for_required_field_is_a_validation_error(client):
    headers = signup(client)
    goal = client.post("/api/v1/goals", json={"title": "Run", "category": "fitness"}, headers=headers).json()["data"]

    response = client.patch(f"/api/v1/goals/{goal['id']}", json={"title": None}, headers=headers)
    assert response.status_code == 422
    assert response.json() == {"kind": "validation_error", "detail": "Field(s) cannot be null: title"}
    assert client.get(f"/api/v1/goals/{goal['id']}", headers=headers).json()["title"] == "Run"


def test_task_lists_and_bulk_create(client):
    alice = signup(client, "idp|alice")
    bob = signup(client, "idp|bob")
    created = client.post("/api/v1/tasks/lists", json={"name": "Errands", "color": "#00aa88"}, headers=alice)
    task_list = created.json()["data"]
    assert [l["name"] for l in client.get("/api/v1/tasks/lists", headers=alice).json()] == ["Errands"]

    bulk = client.post("/api/v1/tasks/bulk", json={"tasks": [
        {"title": "Post office", "priority": "low", "list_id": task_list["id"]},
        {"title": "Groceries", "priority": "medium", "list_id": task_list["id"]},
    ]}, headers=alice)
    assert bulk.status_code == 200
    assert len(bulk.json()["data"]) == 2

    foreign = client.post("/api/v1/tasks", json={"title": "Sneaky", "priority": "low", "list_id": task_list["id"]}, headers=bob)
    assert foreign.status_code == 404
    assert foreign.json() == {"kind": "not_found", "detail": "Task list not found"}


def test_daily_plan_flow(client):
    headers = signup(client)
    plan = client.post("/api/v1/daily-plans/2026-05-04", headers=headers).json()["data"]
    assert plan["date"] == "2026-05-04"

    client.post(f"/api/v1/daily-plans/{plan['id']}/morning", json={"intention": "Deep work first"}, headers=headers)
    blocks = client.put(f"/api/v1/daily-plans/{plan['id']}/time-blocks", json={"time_blocks": [
        {"id": "b1", "start_time": "09:00", "end_time": "11:00", "title": "Write", "type": "deep_work"},
    ]}, headers=headers)
    assert blocks.json()["data"]["time_blocks"][0]["type"] == "deep_work"
    client.post(f"/api/v1/daily-plans/{plan['id']}/evening", json={"day_rating": 8}, headers=headers)
    scored = client.post(f"/api/v1/daily-plans/{plan['id']}/score", json={"daily_score": 96}, headers=headers)
    assert scored.json()["data"]["daily_score"] == 96

    assert client.get("/api/v1/daily-plans/2026-05-04", headers=headers).json()["intention"] == "Deep work first"
    assert client.get("/api/v1/gamification/profile", headers=headers).json()["total_xp"] == 10 + 15 + 25


def test_weekly_review_and_recovery_flow(client):
    headers = signup(client)
    review = client.post("/api/v1/weekly-reviews", json={
        "week_start_date": "2026-05-04", "week_end_date": "2026-05-10",
    }, headers=headers).json()["data"]
    submitted = client.post(f"/api/v1/weekly-reviews/{review['id']}/reflection", json={"overall_rating": 7}, headers=headers)
    assert submitted.json()["data"]["reviewed"] is True
    assert client.get("/api/v1/weekly-reviews/week/2026-05-04", headers=headers).json()["id"] == review["id"]

    recovery = client.post("/api/v1/recovery", json={
        "trigger_reason": "user_initiated", "phase": "gradual_rebuild",
    }, headers=headers).json()["data"]
    assert client.get("/api/v1/recovery/active", headers=headers).json()["id"] == recovery["id"]
    assert client.post(f"/api/v1/recovery/{recovery['id']}/advance", headers=headers).json() == {
        "new_phase": "full_momentum", "completed": False,
    }
    done = client.post(f"/api/v1/recovery/{recovery['id']}/advance", headers=headers).json()
    assert done["completed"] is True
    assert client.get("/api/v1/recovery/active", headers=headers).json() is None
    assert client.get("/api/v1/gamification/profile", headers=headers).json()["total_xp"] == 30 + 100
