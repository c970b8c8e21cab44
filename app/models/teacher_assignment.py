from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint, func

from app.db.base_class import Base


class TeacherAssignment(Base):
    """
    Application-level link between a Classroom teacher and a student.

    Classroom itself has no such relation; this table is the only state
    the service owns. A student has at most one teacher.
    """

    __tablename__ = "teacher_assignments"

    id = Column(Integer, primary_key=True, index=True)

    teacher_id = Column(String(64), nullable=False, index=True)
    teacher_name = Column(String(255), nullable=True)
    teacher_email = Column(String(255), nullable=True)

    student_id = Column(String(64), nullable=False, index=True)
    student_name = Column(String(255), nullable=True)
    student_email = Column(String(255), nullable=True)

    # commission = course section the student is followed in
    commission_name = Column(String(255), nullable=False)
    course_id = Column(String(64), nullable=True)

    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("student_id", name="uq_teacher_assignments_student"),
    )
