from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from app.schemas.classroom import CourseWork, StudentSubmission
from app.schemas.progress import StudentProgress, SubmissionWithTitle

UNKNOWN_ASSIGNMENT = "Unknown Assignment"


def round2(value: float) -> float:
    """Round half-up to 2 decimals (round() would do banker's rounding)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_progress(
    assignments: Sequence[CourseWork],
    submissions: Sequence[StudentSubmission],
) -> StudentProgress:
    """
    Progress of one student over a set of assignments.

    - submitted: state TURNED_IN or RETURNED
    - graded: assigned_grade present
    - average_grade: mean over graded submissions, 0 when none
    - completion_percentage: 100 * submitted / total, 0 when there is no work

    Submissions whose assignment is not in ``assignments`` (deleted after the
    fact) still count and are titled "Unknown Assignment"; completion is capped
    at 100 so such leftovers cannot push it past the scale.
    """
    titles = {a.id: a.title for a in assignments}

    total = len(assignments)
    submitted = sum(1 for s in submissions if s.is_submitted)
    grades = [s.assigned_grade for s in submissions if s.assigned_grade is not None]
    late = sum(1 for s in submissions if s.late)

    average = sum(grades) / len(grades) if grades else 0.0
    completion = min(100.0, submitted * 100.0 / total) if total > 0 else 0.0

    annotated = [
        SubmissionWithTitle(
            **s.model_dump(),
            assignment_title=titles.get(s.course_work_id, UNKNOWN_ASSIGNMENT),
        )
        for s in submissions
    ]

    return StudentProgress(
        total_assignments=total,
        submitted_count=submitted,
        graded_count=len(grades),
        late_count=late,
        average_grade=round2(average),
        completion_percentage=round2(completion),
        submissions=annotated,
    )


def merge_progress(
    parts: Iterable[tuple[Sequence[CourseWork], Sequence[StudentSubmission]]],
) -> StudentProgress:
    """Global view across courses: the aggregate of the concatenated inputs."""
    assignments: list[CourseWork] = []
    submissions: list[StudentSubmission] = []
    for course_assignments, course_submissions in parts:
        assignments.extend(course_assignments)
        submissions.extend(course_submissions)
    return compute_progress(assignments, submissions)
