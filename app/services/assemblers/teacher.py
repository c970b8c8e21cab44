import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from app.core.session import Role
from app.models.teacher_assignment import TeacherAssignment
from app.schemas.classroom import UserProfile, format_course_name
from app.schemas.teacher import StudentAssignment, TeacherData, TeacherStats
from app.services import assignment_store
from app.services.assemblers.base import RoleAssembler
from app.services.classroom_client import ClassroomClient
from app.services.course_join import CourseBundle, load_course_bundles, submissions_for
from app.services.policy import build_alerts, classify_student, group_commissions, sort_alerts
from app.services.progress import merge_progress, round2

logger = logging.getLogger(__name__)


def _roster_profile(student_id: str, bundles: Sequence[CourseBundle]) -> Optional[UserProfile]:
    for bundle in bundles:
        for s in bundle.students:
            if s.user_id == student_id and s.profile is not None:
                return s.profile
    return None


def courses_for_relation(relation: TeacherAssignment, bundles: Sequence[CourseBundle]) -> list[CourseBundle]:
    """Courses a relation's progress is computed over: its own course when set, else every course the student attends."""
    attended = [b for b in bundles if relation.student_id in b.student_ids()]
    if relation.course_id:
        return [b for b in attended if b.course.id == relation.course_id]
    return attended


def build_student_assignment(relation: TeacherAssignment, bundles: Sequence[CourseBundle]) -> StudentAssignment:
    sid = relation.student_id
    courses = courses_for_relation(relation, bundles)
    progress = merge_progress((b.assignments, submissions_for(b.submissions, sid)) for b in courses)

    profile = _roster_profile(sid, bundles)
    name = (profile.display_name if profile else None) or relation.student_name or sid
    email = (profile.email_address if profile else None) or relation.student_email
    course_name = format_course_name(courses[0].course) if len(courses) == 1 else None

    return StudentAssignment(
        student_id=sid,
        student_name=name,
        student_email=email,
        student_avatar=profile.photo_url if profile else None,
        commission_name=relation.commission_name,
        assigned_at=relation.assigned_at,
        status=classify_student(progress),
        progress=progress,
        alerts=build_alerts(sid, name, progress, course_name),
    )


def pending_reviews(students: Sequence[StudentAssignment]) -> int:
    return sum(
        1
        for s in students
        for sub in s.progress.submissions
        if sub.state == "TURNED_IN" and sub.assigned_grade is None
    )


def teacher_stats(students: Sequence[StudentAssignment], commission_count: int) -> TeacherStats:
    n = len(students)
    return TeacherStats(
        total_students=n,
        total_commissions=commission_count,
        students_at_risk=sum(1 for s in students if s.status == "at_risk"),
        students_behind=sum(1 for s in students if s.status == "behind"),
        students_excellent=sum(1 for s in students if s.status == "excellent"),
        students_active=sum(1 for s in students if s.status == "active"),
        average_class_progress=round2(sum(s.progress.completion_percentage for s in students) / n) if n else 0.0,
        pending_reviews=pending_reviews(students),
    )


class TeacherAssembler(RoleAssembler):
    role = Role.teacher

    async def build(self, client: ClassroomClient, db: Session) -> TeacherData:
        profile = await client.get_user_profile("me")
        relations = assignment_store.list_for_teacher(db, profile.id)
        courses = await client.list_courses(teacher_id="me")
        bundles = await load_course_bundles(client, courses)

        logger.info(
            "Teacher %s: %d assigned students across %d courses",
            profile.id,
            len(relations),
            len(bundles),
        )

        students = [build_student_assignment(r, bundles) for r in relations]
        students.sort(key=lambda s: (s.commission_name, s.student_name, s.student_id))
        commissions = group_commissions(students, profile.id, profile.display_name)

        return TeacherData(
            teacher_id=profile.id,
            teacher_name=profile.display_name,
            teacher_email=profile.email_address,
            assigned_students=students,
            commissions=commissions,
            alerts=sort_alerts(a for s in students for a in s.alerts),
            stats=teacher_stats(students, len(commissions)),
        )
