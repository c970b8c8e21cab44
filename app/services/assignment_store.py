from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.teacher_assignment import TeacherAssignment
from app.schemas.teacher_assignment import TeacherAssignmentCreate


class DuplicateAssignmentError(Exception):
    pass


def list_all(db: Session) -> list[TeacherAssignment]:
    return db.query(TeacherAssignment).order_by(TeacherAssignment.id.asc()).all()


def list_for_teacher(db: Session, teacher_id: str) -> list[TeacherAssignment]:
    return (
        db.query(TeacherAssignment)
        .filter(TeacherAssignment.teacher_id == teacher_id)
        .order_by(TeacherAssignment.id.asc())
        .all()
    )


def get_for_student(db: Session, student_id: str) -> TeacherAssignment | None:
    return db.query(TeacherAssignment).filter(TeacherAssignment.student_id == student_id).first()


def assign(db: Session, payload: TeacherAssignmentCreate) -> TeacherAssignment:
    row = TeacherAssignment(**payload.model_dump())
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateAssignmentError(payload.student_id)
    db.refresh(row)
    return row


def unassign(db: Session, student_id: str) -> bool:
    row = get_for_student(db, student_id)
    if row is None:
        return False
    db.delete(row)
    db.commit()
    return True
