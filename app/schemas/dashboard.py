from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.progress import CourseProgressSummary, StudentProgress


class AssignmentRow(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    course_id: str
    course_name: str
    due_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    max_points: Optional[float] = None
    status: str  # "pending" | "submitted" | "graded" | "returned" | "late"
    grade: Optional[float] = None
    is_late: bool = False
    submitted_at: Optional[datetime] = None
    link: str


class StudentDashboard(BaseModel):
    total_courses: int
    total_assignments: int
    pending_assignments: int
    overdue_assignments: int
    average_grade: float
    overall_progress: StudentProgress
    courses: list[CourseProgressSummary]
    upcoming_deadlines: list[AssignmentRow]
    assignments: list[AssignmentRow]
