# src/schemas/course.py
from pydantic import BaseModel


class CourseOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
