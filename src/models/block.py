# src/models/block.py
from sqlalchemy import (
    Column, Integer, ForeignKey, DateTime,
    UniqueConstraint, func, Index, CheckConstraint
)
from src.db import Base


class Block(Base):
    """
    Направленная блокировка: blocker_id скрыл blocked_id.
    Один пользователь может заблокировать другого только один раз.
    """
    __tablename__ = "blocks"

    id = Column(Integer, primary_key=True, index=True)
    blocker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    blocked_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_id", name="uq_block_pair"),
        CheckConstraint("blocker_id <> blocked_id", name="ck_block_not_self"),
        Index("ix_blocks_blocker_id", "blocker_id"),
        Index("ix_blocks_blocked_id", "blocked_id"),
    )

    def __repr__(self):
        return f"<Block(blocker_id={self.blocker_id}, blocked_id={self.blocked_id})>"
