"""
Идемпотентный сидинг демо-данных (пользователи, курсы, записи, связи бадди). Запуск:
  $ python -m src.scripts.seed_demo
"""
from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from src.db import SessionLocal, init_db
from src.models.buddy import BuddyLink
from src.models.course import Course
from src.models.enrollment import Enrollment
from src.models.user import User

log = logging.getLogger(__name__)

USERS = [
    {"id": 1, "name": "Pink Elephant", "email": "pink.elephant@gmail.com"},
    {"id": 2, "name": "Green Dinosaur", "email": "green.dinosaur@gmail.com"},
    {"id": 3, "name": "Hiruna Smith", "email": "hiruna.smith@gmail.com"},
    {"id": 4, "name": "Flynn Smith", "email": "flynn.smith@gmail.com"},
]

COURSES = [
    {"id": 1, "name": "SOFTENG 701"},
    {"id": 2, "name": "SOFTENG 702"},
]

# (course_id, user_id)
ENROLLMENTS = [
    (1, 1), (1, 2), (1, 4),
    (2, 1), (2, 3),
]

# канонические пары (user_min, user_max)
BUDDIES = [
    (1, 2), (1, 3), (1, 4),
    (2, 3), (2, 4),
]


def seed(db: Session) -> None:
    for row in USERS:
        if db.get(User, row["id"]) is None:
            db.add(User(pairing_enabled=False, **row))
    for row in COURSES:
        if db.get(Course, row["id"]) is None:
            db.add(Course(**row))
    db.flush()

    for course_id, user_id in ENROLLMENTS:
        exists = (
            db.query(Enrollment.id)
            .filter(Enrollment.course_id == course_id, Enrollment.user_id == user_id)
            .first()
        )
        if exists is None:
            db.add(Enrollment(course_id=course_id, user_id=user_id))

    for umin, umax in BUDDIES:
        exists = (
            db.query(BuddyLink.id)
            .filter(BuddyLink.user_min == umin, BuddyLink.user_max == umax)
            .first()
        )
        if exists is None:
            db.add(BuddyLink(user_min=umin, user_max=umax))

    db.commit()
    _sync_sequences(db)


def _sync_sequences(db: Session) -> None:
    # PostgreSQL: после вставки явных id двигаем последовательности вперёд
    if db.bind is None or db.bind.dialect.name != "postgresql":
        return
    for table in ("users", "courses"):
        db.execute(text(
            f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
            f"COALESCE((SELECT MAX(id) FROM {table}), 1))"
        ))
    db.commit()


def main() -> None:
    init_db()
    with SessionLocal() as db:
        seed(db)
    log.info("demo data seeded: %d users, %d courses", len(USERS), len(COURSES))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
