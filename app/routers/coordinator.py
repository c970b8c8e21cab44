import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.deps import get_classroom_client, get_db
from app.core.permissions import require_role, require_verified_role
from app.core.session import Role, SessionContext
from app.schemas.classroom import UserProfile
from app.schemas.coordinator import CoordinatorData
from app.schemas.result import Result
from app.schemas.teacher_assignment import TeacherAssignmentCreate, TeacherAssignmentOut
from app.services import assignment_store
from app.services.assemblers.coordinator import CoordinatorAssembler
from app.services.classroom_client import ClassroomClient

logger = logging.getLogger(__name__)

router = APIRouter()

coordinator_only = require_role(Role.coordinator)
verified_coordinator = require_verified_role(Role.coordinator)


@router.get("/data", response_model=Result[CoordinatorData])
async def coordinator_data(
    session: SessionContext = Depends(coordinator_only),
    client: ClassroomClient = Depends(get_classroom_client),
    db: Session = Depends(get_db),
):
    return await CoordinatorAssembler().assemble(session, client, db)


@router.get("/assignments", response_model=list[TeacherAssignmentOut])
def list_assignments(
    db: Session = Depends(get_db),
    _: UserProfile = Depends(verified_coordinator),
):
    return assignment_store.list_all(db)


@router.post(
    "/assignments",
    response_model=TeacherAssignmentOut,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Token not accepted by Google"},
        409: {"description": "Student already has a teacher"},
    },
)
def assign_student(
    payload: TeacherAssignmentCreate,
    db: Session = Depends(get_db),
    caller: UserProfile = Depends(verified_coordinator),
):
    try:
        row = assignment_store.assign(db, payload)
    except assignment_store.DuplicateAssignmentError:
        raise HTTPException(status_code=409, detail="Student already assigned to a teacher")

    logger.info(
        "Coordinator %s assigned student %s to teacher %s (%s)",
        caller.id,
        row.student_id,
        row.teacher_id,
        row.commission_name,
    )
    return row


@router.delete(
    "/assignments/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        401: {"description": "Token not accepted by Google"},
        404: {"description": "Student has no teacher"},
    },
)
def unassign_student(
    student_id: str,
    db: Session = Depends(get_db),
    caller: UserProfile = Depends(verified_coordinator),
):
    if not assignment_store.unassign(db, student_id):
        raise HTTPException(status_code=404, detail="Assignment not found")

    logger.info("Coordinator %s unassigned student %s", caller.id, student_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
