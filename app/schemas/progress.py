from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.classroom import StudentSubmission, UserProfile


class SubmissionWithTitle(StudentSubmission):
    assignment_title: str


class StudentProgress(BaseModel):
    total_assignments: int = 0
    submitted_count: int = 0
    graded_count: int = 0
    late_count: int = 0
    average_grade: float = 0.0
    completion_percentage: float = 0.0
    submissions: list[SubmissionWithTitle] = []


class CourseProgressSummary(BaseModel):
    course_id: str
    course_name: str
    progress: StudentProgress


class StudentProgressItem(BaseModel):
    student: UserProfile
    progress: StudentProgress


class CourseProgress(BaseModel):
    course_id: str
    course_name: str
    total_assignments: int
    total_students: int
    student_progress: list[StudentProgressItem]


class RecentActivity(BaseModel):
    type: str = "assignment_created"
    title: str
    course_id: str
    course_name: str
    creation_time: Optional[datetime] = None


class CourseStats(BaseModel):
    course_id: str
    course_name: str
    students_count: int
    assignments_count: int
    teachers_count: int


class DashboardOverview(BaseModel):
    total_courses: int
    total_students: int
    total_assignments: int
    total_teachers: int
    course_stats: list[CourseStats]
    recent_activity: list[RecentActivity]
