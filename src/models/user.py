# src/models/user.py

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from src.db import Base


class User(Base):
    """
    Студент. buddyCount здесь НЕ хранится - он всегда считается по живым
    связям (см. src/services/buddies.py).
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    pairing_enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, name={self.name}, email={self.email}, pairing_enabled={self.pairing_enabled})>"
