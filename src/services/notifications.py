# src/services/notifications.py
"""
Уведомления для socket-сервера (внешний сервис, адрес из SOCKETIO_HOST/SOCKETIO_PORT).
Доставка best-effort: ошибка доставки логируется и НЕ роняет запрос,
т.к. изменение к этому моменту уже закоммичено.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from src.config import settings

log = logging.getLogger(__name__)


class SocketNotifier:
    """
    Публикатор событий для socket-сервера по адресу host:port.
    Сам транспорт в этот сервис не входит: базовый _send только пишет сообщение в лог,
    реальная доставка подключается снаружи подклассом с переопределённым _send
    (через dependency_overrides для get_notifier).
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def publish(self, type: str, actor_id: int, target_user_id: Optional[int] = None) -> None:
        message = {"type": type, "actor_id": actor_id, "target_user_id": target_user_id}
        try:
            self._send(message)
        except Exception as e:
            log.warning("notify: failed to deliver %s to %s: %s", type, self.address, e)

    def _send(self, message: Dict[str, Any]) -> None:
        # Транспорт до socket-сервера подключается снаружи; по умолчанию только логируем.
        log.info("notify -> %s: %s", self.address, message)


class RecordingNotifier(SocketNotifier):
    """Копит сообщения в памяти (локальная отладка и тесты)."""

    def __init__(self, host: str = "localhost", port: int = 0):
        super().__init__(host, port)
        self.messages: List[Dict[str, Any]] = []

    def _send(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)


notifier = SocketNotifier(settings.socketio_host, settings.socketio_port)


def get_notifier() -> SocketNotifier:
    """FastAPI-зависимость: подменяется в тестах через dependency_overrides."""
    return notifier
