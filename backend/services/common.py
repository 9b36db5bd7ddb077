"""
common.py — Helpers shared by the entity services
Ownership lookups, partial updates, enum and date validation.
"""

from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from auth import CallerContext
from errors import NotFound, ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_owned(db: Session, model, entity_id, caller: CallerContext, label: str):
    """Fetch an entity the caller owns. Missing and foreign rows both raise NotFound."""
    entity = db.get(model, entity_id) if entity_id is not None else None
    if entity is None or entity.user_id != caller.user_id:
        raise NotFound(f"{label} not found")
    return entity


def check_choice(field: str, value, allowed) -> None:
    if value not in allowed:
        raise ValidationError(f"Invalid {field} '{value}'. Expected one of: {', '.join(allowed)}")


def parse_date(value, field: str = "date") -> date | None:
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid {field} '{value}', expected YYYY-MM-DD")


def apply_updates(entity, data: dict, allowed: set, required: set = frozenset()) -> dict:
    """
    Set only the supplied fields. Unknown fields are rejected, not ignored,
    and so is null for a NOT NULL column or a field listed in required.
    Nothing is written unless every field passes.
    """
    unknown = set(data) - allowed
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    not_null = {c.name for c in entity.__table__.columns if not c.nullable} | set(required)
    nulled = sorted(k for k, v in data.items() if v is None and k in not_null)
    if nulled:
        raise ValidationError(f"Field(s) cannot be null: {', '.join(nulled)}")
    for k, v in data.items():
        setattr(entity, k, v)
    if hasattr(entity, "updated_at"):
        entity.updated_at = utcnow()
    return data


def check_links(db: Session, caller: CallerContext, data: dict, links: dict) -> None:
    """Every linked id present in data must point at a row the caller owns."""
    for field, (model, label) in links.items():
        if data.get(field) is not None:
            get_owned(db, model, data[field], caller, label)
