import os
import sys

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import APP_NAME
from database import init_db
from errors import AppError
from routes.daily_plan_routes import router as daily_plan_router
from routes.focus_routes import router as focus_router
from routes.gamification_routes import router as gamification_router
from routes.goal_routes import router as goal_router
from routes.habit_routes import router as habit_router
from routes.habit_stack_routes import router as habit_stack_router
from routes.milestone_routes import router as milestone_router
from routes.plan_routes import router as plan_router
from routes.recovery_routes import router as recovery_router
from routes.task_routes import router as task_router
from routes.template_routes import router as template_router
from routes.user_routes import router as user_router
from routes.wellness_routes import router as wellness_router
from routes.weekly_review_routes import router as weekly_review_router

logger = logging.getLogger("ascend.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    yield


app = FastAPI(title=APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=422, content={"kind": "validation_error", "detail": detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"kind": "internal_error", "detail": "Internal server error"})


@app.get("/api/v1/health-check")
async def health():
    return {"status": "ok", "message": "Backend is alive!"}


for router in (
    user_router,
    gamification_router,
    plan_router,
    goal_router,
    milestone_router,
    habit_router,
    task_router,
    focus_router,
    wellness_router,
    habit_stack_router,
    template_router,
    daily_plan_router,
    weekly_review_router,
    recovery_router,
):
    app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
