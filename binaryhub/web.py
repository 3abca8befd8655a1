import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import require_admin, require_user
from .config import CONFIG
from .handlers import accounts, enrollments, freelancers, mentors, notifications, renewal, team_members
from .models import Admin, User

logger = logging.getLogger(__name__)

CONFIG.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)

app = FastAPI(title="Binary Hub API")
app.mount("/uploads", StaticFiles(directory=CONFIG.UPLOADS_DIR), name="uploads")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONFIG.allowed_origins,
    # any localhost port is allowed outside production
    allow_origin_regex=None if CONFIG.is_production else r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        # JSON decode errors carry a byte offset instead of a field name
        names = [p for p in first.get("loc", ())[1:] if isinstance(p, str)]
        if names:
            message = f"Invalid {'.'.join(names)}: {first.get('msg', 'invalid value')}"
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "message": "Something went wrong!"})


app.include_router(accounts.build_router(User, "user", require_user), prefix="/api/auth", tags=["Auth"])
app.include_router(accounts.build_router(Admin, "admin", require_admin), prefix="/api/admin/auth", tags=["Admin Auth"])
app.include_router(team_members.router, prefix="/api/team-members", tags=["Team Members"])
app.include_router(freelancers.router, prefix="/api/freelancers", tags=["Freelancers"])
app.include_router(mentors.router, prefix="/api/mentors", tags=["Mentors"])
app.include_router(enrollments.router, prefix="/api/enrollments", tags=["Enrollments"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(renewal.router, prefix="/api/course-renewal", tags=["Course Renewal"])


@app.get("/api/health")
async def api_health():
    return {"success": True, "message": "Server is running"}
