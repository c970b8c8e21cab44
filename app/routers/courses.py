import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.core.deps import get_classroom_client
from app.core.permissions import require_role
from app.core.session import Role, SessionContext
from app.schemas.classroom import StudentSubmission
from app.schemas.progress import CourseProgress
from app.schemas.submission import SubmissionGradeUpdate
from app.services.classroom_client import ClassroomClient, is_valid_id
from app.services.overview import course_progress

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_ids(*ids: str) -> None:
    for value in ids:
        if not is_valid_id(value):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid id: {value!r}",
            )


@router.get(
    "/{course_id}/progress",
    response_model=CourseProgress,
    responses={
        404: {"description": "Course not found"},
    },
)
async def get_course_progress(
    course_id: str,
    client: ClassroomClient = Depends(get_classroom_client),
    _: SessionContext = Depends(require_role(Role.teacher, Role.coordinator)),
):
    _check_ids(course_id)
    return await course_progress(client, course_id)


@router.patch(
    "/{course_id}/course-work/{course_work_id}/submissions/{submission_id}/grade",
    response_model=StudentSubmission,
)
async def grade_submission(
    course_id: str,
    course_work_id: str,
    submission_id: str,
    payload: SubmissionGradeUpdate,
    client: ClassroomClient = Depends(get_classroom_client),
    _: SessionContext = Depends(require_role(Role.teacher)),
):
    _check_ids(course_id, course_work_id, submission_id)
    if payload.assigned_grade is None and payload.draft_grade is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="assigned_grade or draft_grade is required",
        )

    updated = await client.grade_submission(
        course_id,
        course_work_id,
        submission_id,
        assigned_grade=payload.assigned_grade,
        draft_grade=payload.draft_grade,
    )
    logger.info("Graded submission %s in course %s", submission_id, course_id)
    return updated


@router.post(
    "/{course_id}/course-work/{course_work_id}/submissions/{submission_id}/return",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def return_submission(
    course_id: str,
    course_work_id: str,
    submission_id: str,
    client: ClassroomClient = Depends(get_classroom_client),
    _: SessionContext = Depends(require_role(Role.teacher)),
):
    _check_ids(course_id, course_work_id, submission_id)
    await client.return_submission(course_id, course_work_id, submission_id)
    logger.info("Returned submission %s in course %s", submission_id, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
