from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_classroom_client, get_db
from app.core.permissions import require_role
from app.core.session import Role, SessionContext
from app.schemas.result import Result
from app.schemas.teacher import TeacherData
from app.services.assemblers.teacher import TeacherAssembler
from app.services.classroom_client import ClassroomClient

router = APIRouter()


@router.get("/data", response_model=Result[TeacherData])
async def teacher_data(
    session: SessionContext = Depends(require_role(Role.teacher)),
    client: ClassroomClient = Depends(get_classroom_client),
    db: Session = Depends(get_db),
):
    return await TeacherAssembler().assemble(session, client, db)
