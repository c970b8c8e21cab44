"""
Derived labels for teacher and coordinator views.

All thresholds live in app.core.config so they can be tuned and tested.
"""
from typing import Iterable, Optional, Sequence

from app.core import config
from app.schemas.coordinator import Recommendation
from app.schemas.progress import StudentProgress
from app.schemas.teacher import Commission, CommissionMetrics, StudentAlert, StudentAssignment
from app.services.progress import round2

SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


def classify_student(progress: StudentProgress) -> str:
    if progress.total_assignments == 0:
        return "active"

    completion = progress.completion_percentage
    if completion < config.AT_RISK_COMPLETION or progress.late_count > config.LATE_ALERT_THRESHOLD:
        return "at_risk"
    if completion < config.BEHIND_COMPLETION or progress.late_count > 0:
        return "behind"
    if completion >= config.EXCELLENT_COMPLETION and progress.average_grade >= config.EXCELLENT_GRADE:
        return "excellent"
    return "active"


def build_alerts(
    student_id: str,
    student_name: str,
    progress: StudentProgress,
    course_name: Optional[str] = None,
) -> list[StudentAlert]:
    alerts: list[StudentAlert] = []

    def add(type_: str, severity: str, message: str, action_required: bool = False) -> None:
        alerts.append(
            StudentAlert(
                id=f"{student_id}:{type_}",
                student_id=student_id,
                student_name=student_name,
                type=type_,
                severity=severity,
                message=message,
                course_name=course_name,
                action_required=action_required,
            )
        )

    completion = progress.completion_percentage
    if progress.total_assignments > 0:
        if completion < config.CRITICAL_COMPLETION:
            add("at_risk", "critical", f"Only {completion:g}% of assignments submitted", True)
        elif completion < config.LOW_COMPLETION:
            add("behind_schedule", "high", f"Completion at {completion:g}%", True)

    late = progress.late_count
    if late > config.LATE_ALERT_THRESHOLD:
        critical = late >= config.LATE_CRITICAL_THRESHOLD
        add(
            "missing_assignments",
            "high" if critical else "medium",
            f"{late} late assignments",
            critical,
        )
    elif late > 0:
        add("behind_schedule", "low", f"{late} late assignment(s)")

    if progress.graded_count > 0 and progress.average_grade < config.LOW_GRADE:
        add("low_grades", "medium", f"Average grade {progress.average_grade:g}")

    return alerts


def sort_alerts(alerts: Iterable[StudentAlert]) -> list[StudentAlert]:
    return sorted(alerts, key=lambda a: (SEVERITY_ORDER.get(a.severity, 99), a.student_name, a.id))


def commission_metrics(students: Sequence[StudentAssignment]) -> CommissionMetrics:
    n = len(students)
    if n == 0:
        return CommissionMetrics()

    total_work = sum(s.progress.total_assignments for s in students)
    submitted = sum(s.progress.submitted_count for s in students)

    return CommissionMetrics(
        total_students=n,
        students_at_risk=sum(1 for s in students if s.status == "at_risk"),
        students_behind=sum(1 for s in students if s.status == "behind"),
        average_progress=round2(sum(s.progress.completion_percentage for s in students) / n),
        average_grade=round2(sum(s.progress.average_grade for s in students) / n),
        completion_rate=round2(submitted * 100.0 / total_work) if total_work else 0.0,
    )


def commission_health(metrics: CommissionMetrics) -> str:
    if metrics.total_students == 0:
        return "good"
    risk_pct = metrics.students_at_risk * 100.0 / metrics.total_students
    if risk_pct > config.COMMISSION_CRITICAL_RISK_PCT:
        return "critical"
    if risk_pct > config.COMMISSION_WARNING_RISK_PCT:
        return "warning"
    if metrics.average_progress > config.COMMISSION_EXCELLENT_PROGRESS:
        return "excellent"
    return "good"


def group_commissions(
    students: Sequence[StudentAssignment],
    teacher_id: Optional[str] = None,
    teacher_name: Optional[str] = None,
) -> list[Commission]:
    """Group by commission name, sorted by name."""
    groups: dict[str, list[StudentAssignment]] = {}
    for s in sorted(students, key=lambda s: s.commission_name):
        groups.setdefault(s.commission_name, []).append(s)

    out: list[Commission] = []
    for name, members in groups.items():
        metrics = commission_metrics(members)
        out.append(
            Commission(
                name=name,
                teacher_id=teacher_id,
                teacher_name=teacher_name,
                student_ids=sorted(m.student_id for m in members),
                metrics=metrics,
                health=commission_health(metrics),
            )
        )
    return out


def recommendation_score(shared_courses: int, current_load: int) -> float:
    """
    Higher is better. Shared courses dominate; among equal overlap the teacher
    with fewer students wins. Strictly increasing in shared_courses and
    strictly decreasing in current_load.
    """
    return shared_courses + 1.0 / (1 + current_load)


def recommend_teachers(
    teachers: Sequence[tuple[str, str]],
    shared_courses: dict[str, int],
    loads: dict[str, int],
    limit: int = config.RECOMMENDATIONS_PER_STUDENT,
) -> list[Recommendation]:
    """``teachers`` is a list of (teacher_id, teacher_name)."""
    ranked = [
        Recommendation(
            teacher_id=t_id,
            teacher_name=t_name,
            shared_courses=shared_courses.get(t_id, 0),
            current_load=loads.get(t_id, 0),
            score=round(recommendation_score(shared_courses.get(t_id, 0), loads.get(t_id, 0)), 4),
        )
        for t_id, t_name in teachers
    ]
    ranked.sort(
        key=lambda r: (
            -recommendation_score(r.shared_courses, r.current_load),
            r.teacher_name,
            r.teacher_id,
        )
    )
    return ranked[:limit]
