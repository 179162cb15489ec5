# src/utils/errors.py
# Перевод доменных ошибок сервисов в HTTP-ответы.

import logging

from fastapi import HTTPException

from src.services.errors import BuddyError, Conflict, Forbidden, NotFound

log = logging.getLogger(__name__)

_STATUS = {
    NotFound: 404,
    Forbidden: 403,
    Conflict: 409,
}


def to_http(err: BuddyError) -> HTTPException:
    status = _STATUS.get(type(err), 400)
    if status != 404:
        log.warning("request refused: %s (%s)", err.code, err.message)
    return HTTPException(status_code=status, detail=err.to_detail())
