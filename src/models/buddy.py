# src/models/buddy.py
from sqlalchemy import (
    Column, Integer, ForeignKey, DateTime,
    UniqueConstraint, func, Index, CheckConstraint
)
from src.db import Base


class BuddyLink(Base):
    """
    Каноническая модель связи "бадди": одна строка на пару пользователей.
    Пара хранится как (user_min, user_max) с инвариантом user_min < user_max,
    поэтому симметрия и отсутствие петель гарантируются схемой.
    """
    __tablename__ = "buddies"

    id = Column(Integer, primary_key=True, index=True)

    user_min = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user_max = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_min", "user_max", name="uq_buddy_pair"),
        CheckConstraint("user_min < user_max", name="ck_buddy_min_lt_max"),
        Index("ix_buddies_user_min", "user_min"),
        Index("ix_buddies_user_max", "user_max"),
    )

    def __repr__(self):
        return f"<BuddyLink(user_min={self.user_min}, user_max={self.user_max})>"
