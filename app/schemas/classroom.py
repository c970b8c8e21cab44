from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from app.core.config import CLASSROOM_WEB_BASE

# submission states that count as handed in
SUBMITTED_STATES = ("TURNED_IN", "RETURNED")


class ClassroomModel(BaseModel):
    class Config:
        populate_by_name = True
        extra = "ignore"


class Name(ClassroomModel):
    given_name: Optional[str] = Field(default=None, alias="givenName")
    family_name: Optional[str] = Field(default=None, alias="familyName")
    full_name: Optional[str] = Field(default=None, alias="fullName")


class UserProfile(ClassroomModel):
    id: str
    name: Name = Field(default_factory=Name)
    email_address: Optional[str] = Field(default=None, alias="emailAddress")
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")

    @property
    def display_name(self) -> str:
        if self.name.full_name:
            return self.name.full_name
        parts = [p for p in (self.name.given_name, self.name.family_name) if p]
        if parts:
            return " ".join(parts)
        return self.email_address or self.id


class Course(ClassroomModel):
    id: str
    name: str
    section: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    course_state: str = Field(default="COURSE_STATE_UNSPECIFIED", alias="courseState")
    alternate_link: Optional[str] = Field(default=None, alias="alternateLink")
    creation_time: Optional[datetime] = Field(default=None, alias="creationTime")

    @property
    def link(self) -> str:
        return self.alternate_link or f"{CLASSROOM_WEB_BASE}/c/{self.id}"


class ClassroomDate(ClassroomModel):
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None


class TimeOfDay(ClassroomModel):
    hours: Optional[int] = None
    minutes: Optional[int] = None
    seconds: Optional[int] = None


class CourseWork(ClassroomModel):
    id: str
    course_id: str = Field(alias="courseId")
    title: str = ""
    description: Optional[str] = None
    state: str = "PUBLISHED"
    alternate_link: Optional[str] = Field(default=None, alias="alternateLink")
    creation_time: Optional[datetime] = Field(default=None, alias="creationTime")
    update_time: Optional[datetime] = Field(default=None, alias="updateTime")
    due_date: Optional[ClassroomDate] = Field(default=None, alias="dueDate")
    due_time: Optional[TimeOfDay] = Field(default=None, alias="dueTime")
    max_points: Optional[float] = Field(default=None, alias="maxPoints")

    @property
    def due_at(self) -> Optional[datetime]:
        """
        dueDate/dueTime as an aware UTC datetime (Classroom stores both in UTC).
        A date without a time is due at the end of that day.
        """
        d = self.due_date
        if d is None or d.year is None or d.month is None or d.day is None:
            return None
        t = self.due_time
        if t is not None and t.hours is not None:
            h, m, s = t.hours, t.minutes or 0, t.seconds or 0
        else:
            h, m, s = 23, 59, 59
        try:
            return datetime(d.year, d.month, d.day, h, m, s, tzinfo=timezone.utc)
        except (TypeError, ValueError):
            return None

    @property
    def link(self) -> str:
        return self.alternate_link or f"{CLASSROOM_WEB_BASE}/c/{self.course_id}/a/{self.id}"


class StudentSubmission(ClassroomModel):
    id: str
    course_id: str = Field(alias="courseId")
    course_work_id: str = Field(alias="courseWorkId")
    user_id: str = Field(alias="userId")
    state: str = "SUBMISSION_STATE_UNSPECIFIED"
    late: bool = False
    assigned_grade: Optional[float] = Field(default=None, alias="assignedGrade")
    draft_grade: Optional[float] = Field(default=None, alias="draftGrade")
    alternate_link: Optional[str] = Field(default=None, alias="alternateLink")
    creation_time: Optional[datetime] = Field(default=None, alias="creationTime")
    update_time: Optional[datetime] = Field(default=None, alias="updateTime")

    @property
    def is_submitted(self) -> bool:
        return self.state in SUBMITTED_STATES

    @property
    def is_graded(self) -> bool:
        return self.assigned_grade is not None


class Student(ClassroomModel):
    course_id: str = Field(alias="courseId")
    user_id: str = Field(alias="userId")
    profile: Optional[UserProfile] = None


class Teacher(ClassroomModel):
    course_id: str = Field(alias="courseId")
    user_id: str = Field(alias="userId")
    profile: Optional[UserProfile] = None


def format_course_name(course: Course) -> str:
    if course.section:
        return f"{course.name} - {course.section}"
    return course.name
