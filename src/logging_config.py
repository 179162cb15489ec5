# src/logging_config.py
# Базовая настройка логирования (корневой логгер, консольный хендлер).

import logging


def setup_logging(level: str = "INFO") -> None:
    """
    Настраивает корневой логгер ровно один раз.
    Если хендлеры уже есть (uvicorn, pytest) - ничего не трогаем.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(handler)
