# src/services/courses.py
from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.models.course import Course
from src.models.enrollment import Enrollment
from src.models.user import User
from src.services.buddies import fits_db_id
from src.services.errors import NotFound
from src.services.events import log_event, COURSE_ENROLLED, COURSE_UNENROLLED

log = logging.getLogger(__name__)


def _require_course(db: Session, course_id: int) -> Course:
    course = None
    if fits_db_id(course_id):
        course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFound("course_not_found", f"Course {course_id} not found")
    return course


def _find_enrollment(db: Session, user_id: int, course_id: int):
    return (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
        .first()
    )


def list_courses(db: Session) -> List[Course]:
    return db.query(Course).order_by(Course.id.asc()).all()


def list_user_courses(db: Session, user_id: int) -> List[Course]:
    return (
        db.query(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .filter(Enrollment.user_id == user_id)
        .order_by(Course.id.asc())
        .all()
    )


def enroll(db: Session, user_id: int, course_id: int) -> bool:
    """Записывает пользователя на курс. Идемпотентно: повторная запись - False."""
    _require_course(db, course_id)
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise NotFound("user_not_found", f"User {user_id} not found")
    if _find_enrollment(db, user_id, course_id):
        return False

    db.add(Enrollment(user_id=user_id, course_id=course_id))
    log_event(db, type=COURSE_ENROLLED, actor_id=user_id, course_id=course_id)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if _find_enrollment(db, user_id, course_id) is None:
            raise
        return False

    log.info("user %s enrolled in course %s", user_id, course_id)
    return True


def unenroll(db: Session, user_id: int, course_id: int) -> bool:
    """Снимает запись на курс, если она есть. Идемпотентно."""
    _require_course(db, course_id)
    enrollment = _find_enrollment(db, user_id, course_id)
    if not enrollment:
        return False

    try:
        db.delete(enrollment)
        log_event(db, type=COURSE_UNENROLLED, actor_id=user_id, course_id=course_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    log.info("user %s left course %s", user_id, course_id)
    return True
