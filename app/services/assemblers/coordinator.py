import logging
from typing import Sequence

from sqlalchemy.orm import Session

from app.core.session import Role
from app.models.teacher_assignment import TeacherAssignment
from app.schemas.classroom import UserProfile, format_course_name
from app.schemas.coordinator import (
    CoordinatorData,
    CoordinatorMetrics,
    StudentRecommendations,
    TeacherLoad,
    UnassignedStudent,
)
from app.schemas.teacher import Commission, StudentAssignment
from app.services import assignment_store
from app.services.assemblers.base import RoleAssembler
from app.services.assemblers.teacher import build_student_assignment
from app.services.classroom_client import ClassroomClient
from app.services.course_join import CourseBundle, load_course_bundles
from app.services.policy import group_commissions, recommend_teachers, sort_alerts
from app.services.progress import round2

logger = logging.getLogger(__name__)


class _Person:
    def __init__(self, person_id: str):
        self.id = person_id
        self.name: str | None = None
        self.email: str | None = None
        self.course_ids: set[str] = set()

    def absorb(self, profile: UserProfile | None) -> None:
        if profile is None:
            return
        if not self.name:
            self.name = profile.display_name
        if not self.email:
            self.email = profile.email_address

    @property
    def display(self) -> str:
        return self.name or self.email or self.id


def _collect(bundles: Sequence[CourseBundle]) -> tuple[dict[str, _Person], dict[str, _Person]]:
    """Union of student and teacher rosters, keyed by user id."""
    students: dict[str, _Person] = {}
    teachers: dict[str, _Person] = {}
    for bundle in bundles:
        for s in bundle.students:
            p = students.setdefault(s.user_id, _Person(s.user_id))
            p.absorb(s.profile)
            p.course_ids.add(bundle.course.id)
        for t in bundle.teachers:
            p = teachers.setdefault(t.user_id, _Person(t.user_id))
            p.absorb(t.profile)
            p.course_ids.add(bundle.course.id)
    return students, teachers


def partition_students(
    universe: set[str],
    relations: Sequence[TeacherAssignment],
) -> tuple[set[str], set[str]]:
    """(assigned, unassigned); the two are disjoint and cover ``universe``."""
    assigned = universe & {r.student_id for r in relations}
    return assigned, universe - assigned


def _metrics(
    universe: set[str],
    assigned: set[str],
    teachers: dict[str, _Person],
    students: Sequence[StudentAssignment],
    commissions: Sequence[Commission],
    alerts_count: int,
) -> CoordinatorMetrics:
    total_work = sum(s.progress.total_assignments for s in students)
    submitted = sum(s.progress.submitted_count for s in students)
    n = len(students)
    return CoordinatorMetrics(
        total_commissions=len(commissions),
        total_teachers=len(teachers),
        total_students=len(universe),
        assigned_students=len(assigned),
        unassigned_students=len(universe) - len(assigned),
        students_at_risk=sum(1 for s in students if s.status == "at_risk"),
        overall_completion_rate=round2(submitted * 100.0 / total_work) if total_work else 0.0,
        average_grade=round2(sum(s.progress.average_grade for s in students) / n) if n else 0.0,
        alerts_count=alerts_count,
    )


class CoordinatorAssembler(RoleAssembler):
    role = Role.coordinator

    async def build(self, client: ClassroomClient, db: Session) -> CoordinatorData:
        relations = assignment_store.list_all(db)
        courses = await client.list_courses()
        bundles = await load_course_bundles(client, courses, with_teachers=True)
        course_names = {b.course.id: format_course_name(b.course) for b in bundles}

        roster_students, teachers = _collect(bundles)
        # teachers known only from the relation table still carry load
        for r in relations:
            p = teachers.setdefault(r.teacher_id, _Person(r.teacher_id))
            if not p.name:
                p.name = r.teacher_name
            if not p.email:
                p.email = r.teacher_email

        universe = set(roster_students)
        assigned, unassigned = partition_students(universe, relations)

        logger.info(
            "Coordinator view: %d students (%d assigned, %d unassigned), %d teachers, %d courses",
            len(universe),
            len(assigned),
            len(unassigned),
            len(teachers),
            len(bundles),
        )

        by_teacher: dict[str, list[StudentAssignment]] = {}
        for r in relations:
            by_teacher.setdefault(r.teacher_id, []).append(build_student_assignment(r, bundles))

        loads: dict[str, int] = {}
        teacher_loads: list[TeacherLoad] = []
        commissions: list[Commission] = []
        all_students: list[StudentAssignment] = []
        for t_id in sorted(teachers, key=lambda t: (teachers[t].display, t)):
            person = teachers[t_id]
            mine = by_teacher.get(t_id, [])
            loads[t_id] = len(mine)
            all_students.extend(mine)
            commissions.extend(group_commissions(mine, t_id, person.display))
            teacher_loads.append(
                TeacherLoad(
                    teacher_id=t_id,
                    teacher_name=person.display,
                    teacher_email=person.email,
                    total_students=len(mine),
                    students_at_risk=sum(1 for s in mine if s.status == "at_risk"),
                    commissions=sorted({s.commission_name for s in mine}),
                    course_ids=sorted(person.course_ids),
                )
            )

        candidates = [(t_id, teachers[t_id].display) for t_id in teachers]
        unassigned_rows: list[UnassignedStudent] = []
        recommendations: list[StudentRecommendations] = []
        for sid in sorted(unassigned, key=lambda s: (roster_students[s].display, s)):
            person = roster_students[sid]
            course_ids = sorted(person.course_ids)
            unassigned_rows.append(
                UnassignedStudent(
                    student_id=sid,
                    student_name=person.display,
                    student_email=person.email,
                    commission_name=course_names[course_ids[0]],
                    course_ids=course_ids,
                )
            )
            shared = {t_id: len(person.course_ids & teachers[t_id].course_ids) for t_id in teachers}
            recommendations.append(
                StudentRecommendations(
                    student_id=sid,
                    student_name=person.display,
                    candidates=recommend_teachers(candidates, shared, loads),
                )
            )

        alerts = sort_alerts(a for s in all_students for a in s.alerts)
        return CoordinatorData(
            teachers=teacher_loads,
            commissions=commissions,
            unassigned_students=unassigned_rows,
            recommendations=recommendations,
            alerts=alerts,
            metrics=_metrics(universe, assigned, teachers, all_students, commissions, len(alerts)),
        )
