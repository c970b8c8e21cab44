import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core import config
from app.core.errors import FetchError
from app.core.session import Role
from app.schemas.classroom import Course, format_course_name
from app.schemas.dashboard import AssignmentRow, StudentDashboard
from app.schemas.progress import CourseProgressSummary
from app.services.assemblers.base import RoleAssembler
from app.services.classroom_client import ClassroomClient
from app.services.tasks import gather_all
from app.services.course_join import CourseData, load_course_data
from app.services.progress import compute_progress, merge_progress
from app.services.status import LATE, PENDING, classify_assignment

logger = logging.getLogger(__name__)

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def _rows_for(course: Course, data: CourseData, now: datetime) -> list[AssignmentRow]:
    course_name = format_course_name(course)
    rows = []
    for item in data.joined:
        a, sub = item.assignment, item.submission
        rows.append(
            AssignmentRow(
                id=a.id,
                title=a.title,
                description=a.description,
                course_id=course.id,
                course_name=course_name,
                due_at=a.due_at,
                created_at=a.creation_time,
                max_points=a.max_points,
                status=classify_assignment(a, sub, now=now),
                grade=sub.assigned_grade if sub else None,
                is_late=bool(sub and sub.late),
                submitted_at=sub.update_time if sub and sub.is_submitted else None,
                link=a.link,
            )
        )
    return rows


def upcoming_deadlines(rows: list[AssignmentRow], limit: int = config.UPCOMING_DEADLINES_LIMIT) -> list[AssignmentRow]:
    """Pending rows, soonest due first; undated rows last, oldest first."""
    pending = [r for r in rows if r.status == PENDING]

    def key(r: AssignmentRow):
        created = r.created_at or _FAR_FUTURE
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return (r.due_at is None, r.due_at or _FAR_FUTURE, created, r.id)

    return sorted(pending, key=key)[:limit]


class StudentAssembler(RoleAssembler):
    role = Role.student

    async def build(self, client: ClassroomClient, db: Session) -> StudentDashboard:
        profile = await client.get_user_profile("me")
        courses = sorted(await client.list_courses(student_id="me"), key=lambda c: (c.name, c.id))

        async def _load(course: Course) -> Optional[CourseData]:
            try:
                return await load_course_data(client, course.id, profile.id)
            except FetchError as exc:
                logger.warning("Skipping course %s for student %s: %s", course.id, profile.id, exc)
                return None

        loaded = await gather_all(*(_load(c) for c in courses))
        now = self.now

        summaries: list[CourseProgressSummary] = []
        rows: list[AssignmentRow] = []
        parts = []
        for course, data in zip(courses, loaded):
            if data is None:
                continue
            parts.append((data.assignments, data.submissions))
            summaries.append(
                CourseProgressSummary(
                    course_id=course.id,
                    course_name=format_course_name(course),
                    progress=compute_progress(data.assignments, data.submissions),
                )
            )
            rows.extend(_rows_for(course, data, now))

        overall = merge_progress(parts)
        return StudentDashboard(
            total_courses=len(summaries),
            total_assignments=len(rows),
            pending_assignments=sum(1 for r in rows if r.status in (PENDING, LATE)),
            overdue_assignments=sum(1 for r in rows if r.status == LATE),
            average_grade=overall.average_grade,
            overall_progress=overall,
            courses=summaries,
            upcoming_deadlines=upcoming_deadlines(rows),
            assignments=rows,
        )
