from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.weekly_review_service import WeeklyReviewService

router = APIRouter(prefix="/api/v1/weekly-reviews", tags=["Weekly Reviews"])

class ReviewGenerate(BaseModel):
    week_start_date: str
    week_end_date: str

class ReviewReflection(BaseModel):
    user_reflection: Optional[str] = None
    next_week_goals: Optional[list[str]] = None
    overall_rating: Optional[int] = None
    highlights: Optional[list[str]] = None
    areas_to_improve: Optional[list[str]] = None

@router.get("")
def list_reviews(caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [r.to_dict() for r in WeeklyReviewService.list_all(db, caller)]

@router.post("")
def generate_review(data: ReviewGenerate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    review = WeeklyReviewService.generate(db, caller, data.week_start_date, data.week_end_date)
    return {"status": "success", "data": review.to_dict()}

@router.get("/week/{week_start}")
def get_by_week(week_start: str, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    review = WeeklyReviewService.get_by_week(db, caller, week_start)
    return review.to_dict() if review else None

@router.post("/{review_id}/reflection")
def submit_reflection(review_id: int, data: ReviewReflection, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    review = WeeklyReviewService.submit_reflection(db, caller, review_id, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": review.to_dict()}
