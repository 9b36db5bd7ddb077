from fastapi import APIRouter, Depends

from auth import CallerContext, get_caller
from services.plan_service import PlanService

router = APIRouter(prefix="/api/v1/plans", tags=["Plans"])

@router.get("/limits")
def get_limits(caller: CallerContext = Depends(get_caller)):
    return PlanService.get_limits(caller)
