from app.api.http.health import router as health_router
from app.api.http.auth import router as auth_router
from app.api.http.resumes import router as resumes_router
from app.api.http.analytics import router as analytics_router

__all__ = [
    "health_router",
    "auth_router",
    "resumes_router",
    "analytics_router"
]
