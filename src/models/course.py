# src/models/course.py

from sqlalchemy import Column, Integer, String, DateTime, func
from src.db import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Course(id={self.id}, name={self.name})>"
