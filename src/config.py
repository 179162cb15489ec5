# src/config.py
# Настройки приложения: читаются из переменных окружения (и .env через python-dotenv).

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    """
    Настройки процесса. Значения вычисляются один раз при импорте,
    поэтому переменные окружения нужно выставлять ДО импорта src.*.
    """
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./buddymatcher.db")
    session_secret: str = os.getenv("SESSION_SECRET", "change_me")
    session_cookie: str = os.getenv("SESSION_COOKIE", "buddymatcher_session")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Адрес socket-сервера уведомлений (сам сервер - внешний сервис)
    socketio_host: str = os.getenv("SOCKETIO_HOST", "localhost")
    socketio_port: int = int(os.getenv("SOCKETIO_PORT", "8085"))

    cors_origins: List[str] = field(
        default_factory=lambda: _split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        )
    )


settings = Settings()
