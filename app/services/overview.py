import logging
from datetime import datetime, timezone

from app.core import config
from app.core.errors import FetchError
from app.schemas.classroom import UserProfile, format_course_name
from app.schemas.progress import (
    CourseProgress,
    CourseStats,
    DashboardOverview,
    RecentActivity,
    StudentProgressItem,
)
from app.services.classroom_client import ClassroomClient
from app.services.tasks import gather_all
from app.services.course_join import load_course_bundle, submissions_for
from app.services.progress import compute_progress

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


async def course_progress(client: ClassroomClient, course_id: str) -> CourseProgress:
    """Progress of every enrolled student in one course."""
    course = await client.get_course(course_id)
    bundle = await load_course_bundle(client, course)

    items = []
    for student in sorted(bundle.students, key=lambda s: s.user_id):
        profile = student.profile or UserProfile(id=student.user_id)
        items.append(
            StudentProgressItem(
                student=profile,
                progress=compute_progress(bundle.assignments, submissions_for(bundle.submissions, student.user_id)),
            )
        )

    return CourseProgress(
        course_id=course.id,
        course_name=format_course_name(course),
        total_assignments=len(bundle.assignments),
        total_students=len(bundle.students),
        student_progress=items,
    )


async def dashboard_overview(client: ClassroomClient, limit: int = config.RECENT_ACTIVITY_LIMIT) -> DashboardOverview:
    """Counts over every course visible to the caller plus the most recent assignments."""
    courses = await client.list_courses()

    async def _stats(course):
        try:
            work, students, teachers = await gather_all(
                client.list_course_work(course.id),
                client.list_students(course.id),
                client.list_teachers(course.id),
            )
        except FetchError as exc:
            logger.warning("Skipping course %s in overview: %s", course.id, exc)
            return None
        return course, work, students, teachers

    results = [r for r in await gather_all(*(_stats(c) for c in courses)) if r is not None]

    course_stats = []
    activity = []
    student_ids: set[str] = set()
    teacher_ids: set[str] = set()
    total_assignments = 0
    for course, work, students, teachers in results:
        name = format_course_name(course)
        student_ids.update(s.user_id for s in students)
        teacher_ids.update(t.user_id for t in teachers)
        total_assignments += len(work)
        course_stats.append(
            CourseStats(
                course_id=course.id,
                course_name=name,
                students_count=len(students),
                assignments_count=len(work),
                teachers_count=len(teachers),
            )
        )
        activity.extend(
            RecentActivity(title=a.title, course_id=course.id, course_name=name, creation_time=a.creation_time)
            for a in work
        )

    activity.sort(key=lambda r: (r.creation_time or _EPOCH, r.title), reverse=True)

    return DashboardOverview(
        total_courses=len(course_stats),
        total_students=len(student_ids),
        total_assignments=total_assignments,
        total_teachers=len(teacher_ids),
        course_stats=course_stats,
        recent_activity=activity[:limit],
    )
