import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.http.health import router as health_router
from app.api.http.auth import router as auth_router
from app.api.http.resumes import router as resumes_router
from app.api.http.analytics import router as analytics_router
from app.api.http.errors import validation_error_handler
from app.core.config import settings
from app.core.logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Resume Architect",
    description="API for building resumes with version history",
    version="1.0.0"
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, validation_error_handler)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(resumes_router)
app.include_router(analytics_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "Resume Architect API is running",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
