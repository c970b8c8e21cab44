from pydantic import BaseModel

from app.schemas.teacher import Commission, StudentAlert


class UnassignedStudent(BaseModel):
    student_id: str
    student_name: str
    student_email: str | None = None
    commission_name: str
    course_ids: list[str]


class TeacherLoad(BaseModel):
    teacher_id: str
    teacher_name: str
    teacher_email: str | None = None
    total_students: int
    students_at_risk: int
    commissions: list[str]
    course_ids: list[str]


class Recommendation(BaseModel):
    teacher_id: str
    teacher_name: str
    shared_courses: int
    current_load: int
    score: float


class StudentRecommendations(BaseModel):
    student_id: str
    student_name: str
    candidates: list[Recommendation]


class CoordinatorMetrics(BaseModel):
    total_commissions: int
    total_teachers: int
    total_students: int
    assigned_students: int
    unassigned_students: int
    students_at_risk: int
    overall_completion_rate: float
    average_grade: float
    alerts_count: int


class CoordinatorData(BaseModel):
    teachers: list[TeacherLoad]
    commissions: list[Commission]
    unassigned_students: list[UnassignedStudent]
    recommendations: list[StudentRecommendations]
    alerts: list[StudentAlert]
    metrics: CoordinatorMetrics
