# liftlog/main.py
import os
import time
import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from liftlog.routers.auth import router as auth_router
from liftlog.routers.workouts import router as workouts_router
from liftlog.routers.sets import router as sets_router
from liftlog.routers.routines import router as routines_router
from liftlog.routers.analytics import router as analytics_router
from liftlog.routers.exercises import router as exercises_router
from liftlog.db import SessionLocal  # for healthz DB check
from liftlog.errors import register_error_handlers
from liftlog.settings import get_settings

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("uvicorn")

app = FastAPI(
    title="LiftLog API",
    openapi_tags=[
        {"name": "auth", "description": "Accounts, tokens and weight-unit preference"},
        {"name": "workouts", "description": "Workouts, started freely or from a routine"},
        {"name": "sets", "description": "Sets logged within a workout"},
        {"name": "routines", "description": "Workout templates"},
        {"name": "analytics", "description": "Stats derived from workout history"},
        {"name": "exercises", "description": "Exercise catalog"},
    ],
)

# CORS (relax for local dev; tighten origins in prod via env)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS.split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    log.info("rid=%s %s %s -> %s in %.1fms",
             req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response

@app.get("/")
def root():
    return {"ok": True, "name": "LiftLog API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/healthz")
def healthz():
    # Quick DB sanity check
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as e:
        log.warning("healthz database check failed: %s", e)
        return {"status": "degraded", "error": str(e)}

@app.get("/version")
def version():
    return {"version": os.getenv("API_VERSION", "dev")}

# Routers
app.include_router(auth_router)
app.include_router(workouts_router)
app.include_router(sets_router)
app.include_router(routines_router)
app.include_router(analytics_router)
app.include_router(exercises_router)
