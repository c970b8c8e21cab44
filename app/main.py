import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import AuthError, FetchError
from app.core.logging_middleware import LoggingMiddleware
from app.db.init_db import init_db

from app.routers.auth import router as auth_router
from app.routers.coordinator import router as coordinator_router
from app.routers.courses import router as courses_router
from app.routers.dashboard import router as dashboard_router
from app.routers.student import router as student_router
from app.routers.teacher import router as teacher_router

logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)

app = FastAPI(title="Classroom Progress Dashboard")

# Middleware
app.add_middleware(LoggingMiddleware)


# Classroom failures outside an assembler (pass-through routes, course progress)
@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    logger.warning("Classroom request failed: %s", exc)
    status_code = exc.status if exc.status in (403, 404) else 502
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(student_router, prefix="/student", tags=["student"])
app.include_router(teacher_router, prefix="/teacher", tags=["teacher"])
app.include_router(coordinator_router, prefix="/coordinator", tags=["coordinator"])
app.include_router(courses_router, prefix="/courses", tags=["courses"])
