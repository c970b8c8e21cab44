from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_classroom_client, get_db
from app.core.permissions import require_role
from app.core.session import Role, SessionContext
from app.schemas.dashboard import StudentDashboard
from app.schemas.result import Result
from app.services.assemblers.student import StudentAssembler
from app.services.classroom_client import ClassroomClient

router = APIRouter()


@router.get("/dashboard", response_model=Result[StudentDashboard])
async def student_dashboard(
    session: SessionContext = Depends(require_role(Role.student)),
    client: ClassroomClient = Depends(get_classroom_client),
    db: Session = Depends(get_db),
):
    return await StudentAssembler().assemble(session, client, db)
