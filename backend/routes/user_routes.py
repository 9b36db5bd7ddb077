from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller, get_identity
from database import get_db
from services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    timezone: Optional[str] = None
    theme: Optional[str] = None

@router.post("/store")
def store_user(identity: dict = Depends(get_identity), db: Session = Depends(get_db)):
    """Create or refresh the internal user for the signed-in identity."""
    user = UserService.store(db, identity)
    return {"status": "success", "data": user.to_dict()}

@router.get("/me")
def current_user(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return UserService.current(db, caller).to_dict()

@router.patch("/me")
def update_profile(data: ProfileUpdate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    user = UserService.update_profile(db, caller, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": user.to_dict()}

@router.post("/me/onboarding")
def complete_onboarding(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    user = UserService.complete_onboarding(db, caller)
    return {"status": "success", "data": user.to_dict()}
