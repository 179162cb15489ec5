# src/main.py
# Главная точка входа FastAPI для BuddyMatcher.
#  • Сессия: подписанная cookie (SessionMiddleware), id пользователя под ключом UserId
#  • Роутеры: /api/users (профиль, бадди, блокировки), /api/courses, /api/auth, /api/events

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from src.config import settings
from src.logging_config import setup_logging
from src.db import init_db

from src.routers.auth import router as auth_router
from src.routers.users import router as users_router
from src.routers.courses import router as courses_router
from src.routers.events import router as events_router

setup_logging(settings.log_level)

app = FastAPI(
    title="BuddyMatcher Backend",
    description="Backend для BuddyMatcher: студенты, курсы, бадди и блокировки.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    session_cookie=settings.session_cookie,
)

# --- Подключение роутеров ---
app.include_router(auth_router,    prefix="/api/auth",    tags=["Авторизация"])
app.include_router(users_router,   prefix="/api/users",   tags=["Пользователи"])
app.include_router(courses_router, prefix="/api/courses", tags=["Курсы"])
app.include_router(events_router,  prefix="/api/events",  tags=["События"])


@app.get("/")
def root():
    """Простой healthcheck (+ адрес socket-сервера уведомлений для фронта)."""
    return {
        "message": "BuddyMatcher backend работает!",
        "docs": "/docs",
        "socket": {"host": settings.socketio_host, "port": settings.socketio_port},
    }


@app.on_event("startup")
def _startup():
    # Для sqlite/dev создаём таблицы сразу; в проде схема уже накатана alembic
    if settings.database_url.startswith("sqlite"):
        init_db()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("src.main:app", host="0.0.0.0", port=8000, reload=False)
