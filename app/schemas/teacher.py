from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.schemas.progress import StudentProgress


class StudentAlert(BaseModel):
    id: str
    student_id: str
    student_name: str
    type: str  # "behind_schedule" | "missing_assignments" | "low_grades" | "at_risk"
    severity: str  # "critical" | "high" | "medium" | "low"
    message: str
    course_name: Optional[str] = None
    action_required: bool = False


class StudentAssignment(BaseModel):
    student_id: str
    student_name: str
    student_email: Optional[str] = None
    student_avatar: Optional[str] = None
    commission_name: str
    assigned_at: Optional[datetime] = None
    status: str  # "active" | "at_risk" | "behind" | "excellent"
    progress: StudentProgress
    alerts: list[StudentAlert] = []


class CommissionMetrics(BaseModel):
    total_students: int = 0
    students_at_risk: int = 0
    students_behind: int = 0
    average_progress: float = 0.0
    average_grade: float = 0.0
    completion_rate: float = 0.0


class Commission(BaseModel):
    name: str
    teacher_id: Optional[str] = None
    teacher_name: Optional[str] = None
    student_ids: list[str]
    metrics: CommissionMetrics
    health: str  # "critical" | "warning" | "excellent" | "good"


class TeacherStats(BaseModel):
    total_students: int
    total_commissions: int
    students_at_risk: int
    students_behind: int
    students_excellent: int
    students_active: int
    average_class_progress: float
    pending_reviews: int


class TeacherData(BaseModel):
    teacher_id: str
    teacher_name: str
    teacher_email: Optional[str] = None
    assigned_students: list[StudentAssignment]
    commissions: list[Commission]
    alerts: list[StudentAlert]
    stats: TeacherStats
