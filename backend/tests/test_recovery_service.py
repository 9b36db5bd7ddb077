from datetime import timedelta

import pytest

from errors import NotFound, ValidationError
from models.gamification import XPEvent
from models.user import User
from services.common import utcnow
from services.gamification_service import GamificationService
from services.recovery_service import PHASES, RecoveryService, suggested_phase


def start(db, caller, phase="minimal_restart", **fields):
    data = {"trigger_reason": "long_absence", "days_inactive": 5, "phase": phase, **fields}
    return RecoveryService.start(db, caller, data)


def set_last_active(db, caller, days_ago):
    user = db.get(User, caller.user_id)
    user.last_active_at = utcnow() - timedelta(days=days_ago, hours=1)
    db.commit()


@pytest.mark.parametrize("days, phase", [
    (0, "full_momentum"),
    (2, "full_momentum"),
    (3, "minimal_restart"),
    (7, "assessment"),
    (13, "assessment"),
    (14, "acknowledgement"),
    (60, "acknowledgement"),
])
def test_suggested_phase(days, phase):
    assert suggested_phase(days) == phase


def test_detect_need_for_recent_user(db, caller):
    result = RecoveryService.detect_need(db, caller)
    assert result == {"needs_recovery": False, "days_inactive": 0, "suggested_phase": "full_momentum"}
    user = db.get(User, caller.user_id)
    assert user.recovery_status == "active"
    assert user.last_active_at is not None


def test_detect_need_after_absence(db, caller):
    set_last_active(db, caller, 8)
    result = RecoveryService.detect_need(db, caller)
    assert result == {"needs_recovery": True, "days_inactive": 8, "suggested_phase": "assessment"}
    assert db.get(User, caller.user_id).recovery_status == "recovering"

    # the check refreshed last activity
    assert RecoveryService.detect_need(db, caller)["days_inactive"] == 0


def test_detect_need_reports_open_recovery(db, caller):
    recovery = start(db, caller, days_inactive=9, phase="assessment")
    result = RecoveryService.detect_need(db, caller)
    assert result == {
        "needs_recovery": True, "days_inactive": 9,
        "suggested_phase": "assessment", "existing_recovery_id": recovery.id,
    }


def test_start_validates(db, caller):
    with pytest.raises(ValidationError):
        start(db, caller, trigger_reason="boredom")
    with pytest.raises(ValidationError):
        start(db, caller, phase="denial")
    with pytest.raises(ValidationError):
        start(db, caller, days_inactive=-1)


def test_advance_walks_phases_then_pays_comeback(db, caller):
    recovery = start(db, caller, phase="acknowledgement", minimal_routine=["Drink water"])
    assert recovery.status == "in_progress"
    assert recovery.minimal_routine == ["Drink water"]

    for expected in PHASES[1:]:
        assert RecoveryService.advance_phase(db, caller, recovery.id) == {"new_phase": expected, "completed": False}
    assert GamificationService.get_profile(db, caller)["total_xp"] == 0

    result = RecoveryService.advance_phase(db, caller, recovery.id)
    assert result == {"new_phase": "full_momentum", "completed": True, "xp_gain": 100}

    db.refresh(recovery)
    assert recovery.status == "completed"
    assert recovery.completed_at is not None
    assert recovery.recovery_streak == 4
    assert db.get(User, caller.user_id).recovery_status == "active"
    assert db.query(XPEvent).one().source == "comeback"
    assert RecoveryService.get_active(db, caller) is None


def test_completed_recovery_cannot_advance(db, caller):
    recovery = start(db, caller, phase="full_momentum")
    RecoveryService.advance_phase(db, caller, recovery.id)
    with pytest.raises(ValidationError):
        RecoveryService.advance_phase(db, caller, recovery.id)
    assert GamificationService.get_profile(db, caller)["total_xp"] == 100


def test_recoveries_are_owner_scoped(db, caller, other_caller):
    recovery = start(db, caller)
    with pytest.raises(NotFound):
        RecoveryService.advance_phase(db, other_caller, recovery.id)
    with pytest.raises(NotFound):
        RecoveryService.update_notes(db, other_caller, recovery.id, {"notes": "mine now"})
    assert RecoveryService.get_active(db, other_caller) is None
    assert RecoveryService.list_history(db, other_caller) == []


def test_update_notes_and_history(db, caller):
    first = start(db, caller, phase="full_momentum")
    RecoveryService.advance_phase(db, caller, first.id)
    second = start(db, caller, trigger_reason="user_initiated")

    updated = RecoveryService.update_notes(db, caller, second.id, {
        "notes": "Small steps", "adjusted_goals": ["Walk daily"],
    })
    assert updated.notes == "Small steps"
    assert updated.adjusted_goals == ["Walk daily"]
    with pytest.raises(ValidationError):
        RecoveryService.update_notes(db, caller, second.id, {"notes": ""})

    assert RecoveryService.get_active(db, caller).id == second.id
    assert [r.id for r in RecoveryService.list_history(db, caller)] == [second.id, first.id]
