# src/routers/courses.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from src.db import get_db
from src.schemas.course import CourseOut
from src.services import courses
from src.services.errors import BuddyError
from src.utils.errors import to_http
from src.utils.session_dep import get_session_user_id

router = APIRouter()


@router.get("", response_model=List[CourseOut])
def get_courses(db: Session = Depends(get_db)):
    """Все курсы по возрастанию id."""
    return courses.list_courses(db)


@router.get("/me", response_model=List[CourseOut])
def get_my_courses(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    return courses.list_user_courses(db, user_id)


@router.post("/{course_id}/enroll", response_model=dict)
def enroll(
    course_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    try:
        created = courses.enroll(db, user_id, course_id)
    except BuddyError as e:
        raise to_http(e)
    return {"success": True, "created": created}


@router.delete("/{course_id}/enroll", response_model=dict)
def unenroll(
    course_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_session_user_id),
):
    try:
        removed = courses.unenroll(db, user_id, course_id)
    except BuddyError as e:
        raise to_http(e)
    return {"success": True, "removed": removed}
