from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from auth import CallerContext, get_caller
from database import get_db
from services.template_service import SuggestedHabit, TemplateMilestone, TemplateService

router = APIRouter(prefix="/api/v1/goal-templates", tags=["Goal Templates"])

class TemplateCreate(BaseModel):
    title: str
    category: str
    life_domain: str
    goal_type: str
    estimated_weeks: int
    difficulty_level: int
    description: Optional[str] = ""
    milestones: list[TemplateMilestone] = []
    suggested_habits: Optional[list[SuggestedHabit]] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_public: Optional[bool] = False

class TemplateUse(BaseModel):
    target_date: Optional[str] = None

@router.get("")
def list_templates(category: Optional[str] = None, life_domain: Optional[str] = None,
                   caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return [t.to_dict() for t in TemplateService.list_public(db, category, life_domain)]

@router.get("/{template_id}")
def get_template(template_id: int, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return TemplateService.get(db, template_id).to_dict()

@router.post("")
def create_template(data: TemplateCreate, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    template = TemplateService.create(db, caller, data.model_dump(exclude_unset=True))
    return {"status": "success", "data": template.to_dict()}

@router.post("/{template_id}/use")
def use_template(template_id: int, data: TemplateUse, caller: CallerContext = Depends(get_caller), db: Session = Depends(get_db)):
    return {"status": "success", "data": TemplateService.use_template(db, caller, template_id, data.target_date)}
