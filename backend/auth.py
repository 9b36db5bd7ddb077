from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from config import JWT_SECRET, JWT_ALGORITHM, JWT_ISSUER, JWT_EXPIRY_HOURS
from database import get_db
from errors import Unauthenticated
from models.user import User


@dataclass(frozen=True)
class CallerContext:
    """The resolved caller, built once per request and passed into every service call."""
    user_id: int
    plan: str
    external_id: str


def create_token(data: dict, expires_hours: int = JWT_EXPIRY_HOURS) -> str:
    """Create a signed identity token. The identity provider does this in production."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(hours=expires_hours)
    to_encode.update({"exp": expire})
    if JWT_ISSUER and "iss" not in to_encode:
        to_encode["iss"] = JWT_ISSUER
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM], issuer=JWT_ISSUER)
    except JWTError:
        return None


async def get_identity(request: Request) -> dict:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it, and returns the identity claims.
    Raises Unauthenticated if the token is missing, invalid or has no subject.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise Unauthenticated("Missing or invalid Authorization header")

    token = auth_header.split(" ", 1)[1]
    payload = verify_token(token)
    if payload is None:
        raise Unauthenticated("Invalid or expired token")

    if not payload.get("sub"):
        raise Unauthenticated("Token payload missing subject claim")

    return payload


def resolve_caller(db: Session, identity: dict) -> CallerContext:
    """Map identity claims to the internal user record."""
    user = db.query(User).filter_by(external_id=identity["sub"]).first()
    if user is None:
        raise Unauthenticated("User not found — complete signup first")
    return CallerContext(user_id=user.id, plan=user.plan or "free", external_id=user.external_id)


def get_caller(identity: dict = Depends(get_identity), db: Session = Depends(get_db)) -> CallerContext:
    return resolve_caller(db, identity)
