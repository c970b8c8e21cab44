import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

from app.core.errors import FetchError
from app.schemas.classroom import Course, CourseWork, Student, StudentSubmission, Teacher
from app.services.classroom_client import ClassroomClient
from app.services.tasks import gather_all

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class JoinedAssignment:
    assignment: CourseWork
    submission: Optional[StudentSubmission] = None


@dataclass
class CourseData:
    course_id: str
    assignments: list[CourseWork]
    submissions: list[StudentSubmission]
    joined: list[JoinedAssignment]
    failed_assignment_ids: list[str] = field(default_factory=list)


def _created(a: CourseWork) -> datetime:
    ts = a.creation_time
    if ts is None:
        return _EPOCH
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def sort_assignments(assignments: Sequence[CourseWork]) -> list[CourseWork]:
    """Creation time ascending, undated last, id as tie-break."""
    return sorted(assignments, key=lambda a: (a.creation_time is None, _created(a), a.id))


async def fetch_course_submissions(
    client: ClassroomClient,
    course_id: str,
    assignments: Sequence[CourseWork],
    user_id: Optional[str] = None,
) -> tuple[list[StudentSubmission], list[str]]:
    """
    Submissions for every assignment of a course, one request per assignment.

    Requests run concurrently. An assignment whose fetch fails is logged and
    skipped; an AuthError still aborts the whole call. Returns the submissions
    (deduplicated by id, in assignment order then submission id) and the ids
    of assignments that could not be fetched.
    """
    ordered = sort_assignments(assignments)
    failed: list[str] = []

    async def _one(assignment: CourseWork) -> list[StudentSubmission]:
        try:
            return await client.list_submissions(course_id, assignment.id, user_id=user_id)
        except FetchError as exc:
            logger.warning(
                "Skipping submissions for assignment %s in course %s: %s",
                assignment.id,
                course_id,
                exc,
            )
            failed.append(assignment.id)
            return []

    results = await gather_all(*(_one(a) for a in ordered))

    seen: set[str] = set()
    submissions: list[StudentSubmission] = []
    for batch in results:
        for sub in sorted(batch, key=lambda s: s.id):
            if sub.id in seen:
                continue
            seen.add(sub.id)
            submissions.append(sub)

    order = {a.id: i for i, a in enumerate(ordered)}
    failed.sort(key=lambda a_id: order.get(a_id, len(order)))
    return submissions, failed


def submissions_for(submissions: Sequence[StudentSubmission], student_id: str) -> list[StudentSubmission]:
    return [s for s in submissions if s.user_id == student_id]


def join_assignments(
    assignments: Sequence[CourseWork],
    submissions: Sequence[StudentSubmission],
    student_id: Optional[str] = None,
) -> list[JoinedAssignment]:
    """Pair each assignment with the student's submission for it (or None)."""
    by_assignment: dict[str, StudentSubmission] = {}
    for sub in submissions:
        if student_id is not None and sub.user_id != student_id:
            continue
        # at most one submission per (assignment, student); keep the first
        by_assignment.setdefault(sub.course_work_id, sub)

    return [JoinedAssignment(a, by_assignment.get(a.id)) for a in sort_assignments(assignments)]


async def load_course_data(
    client: ClassroomClient,
    course_id: str,
    student_id: str,
) -> CourseData:
    """Assignments of one course joined against one student's submissions."""
    assignments = sort_assignments(await client.list_course_work(course_id))
    fetched, failed = await fetch_course_submissions(client, course_id, assignments, user_id=student_id)

    own = submissions_for(fetched, student_id)

    return CourseData(
        course_id=course_id,
        assignments=assignments,
        submissions=own,
        joined=join_assignments(assignments, own),
        failed_assignment_ids=failed,
    )


@dataclass
class CourseBundle:
    """Everything one course contributes to a teacher or coordinator view."""

    course: Course
    assignments: list[CourseWork]
    submissions: list[StudentSubmission]
    students: list[Student]
    teachers: list[Teacher] = field(default_factory=list)
    failed_assignment_ids: list[str] = field(default_factory=list)

    def student_ids(self) -> set[str]:
        return {s.user_id for s in self.students}


async def load_course_bundle(
    client: ClassroomClient,
    course: Course,
    with_teachers: bool = False,
) -> CourseBundle:
    if with_teachers:
        assignments, students, teachers = await gather_all(
            client.list_course_work(course.id),
            client.list_students(course.id),
            client.list_teachers(course.id),
        )
    else:
        assignments, students = await gather_all(
            client.list_course_work(course.id),
            client.list_students(course.id),
        )
        teachers = []

    assignments = sort_assignments(assignments)
    submissions, failed = await fetch_course_submissions(client, course.id, assignments)
    return CourseBundle(
        course=course,
        assignments=assignments,
        submissions=submissions,
        students=students,
        teachers=teachers,
        failed_assignment_ids=failed,
    )


async def load_course_bundles(
    client: ClassroomClient,
    courses: Sequence[Course],
    with_teachers: bool = False,
) -> list[CourseBundle]:
    """Bundles for many courses; a course that fails to load is logged and left out."""

    async def _safe(course: Course) -> Optional[CourseBundle]:
        try:
            return await load_course_bundle(client, course, with_teachers=with_teachers)
        except FetchError as exc:
            logger.warning("Skipping course %s (%s): %s", course.id, course.name, exc)
            return None

    results = await gather_all(*(_safe(c) for c in courses))
    return [b for b in results if b is not None]
