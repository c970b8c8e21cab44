from datetime import datetime

from pydantic import BaseModel, Field


class TeacherAssignmentCreate(BaseModel):
    teacher_id: str = Field(min_length=1)
    student_id: str = Field(min_length=1)
    commission_name: str = Field(min_length=1, max_length=255)
    course_id: str | None = None
    teacher_name: str | None = None
    teacher_email: str | None = None
    student_name: str | None = None
    student_email: str | None = None


class TeacherAssignmentOut(BaseModel):
    id: int
    teacher_id: str
    teacher_name: str | None
    teacher_email: str | None
    student_id: str
    student_name: str | None
    student_email: str | None
    commission_name: str
    course_id: str | None
    assigned_at: datetime

    class Config:
        from_attributes = True
