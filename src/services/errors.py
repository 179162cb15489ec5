# src/services/errors.py
# Доменные ошибки сервисов. Роутеры переводят их в HTTP-статусы.


class BuddyError(Exception):
    """Базовая ошибка: машинный code + человекочитаемое сообщение."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code
        self.message = message or code

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFound(BuddyError):
    """Пользователь или курс не существует."""


class Forbidden(BuddyError):
    """Операция нарушает инвариант (связь с собой, заблокированная пара)."""


class Conflict(BuddyError):
    """Ресурс уже существует (например, email занят)."""
