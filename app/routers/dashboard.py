from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.current_user import get_session
from app.core.deps import get_classroom_client, get_db
from app.core.session import SessionContext
from app.schemas.progress import DashboardOverview
from app.services.assemblers.base import assembler_for
from app.services.classroom_client import ClassroomClient
from app.services.overview import dashboard_overview

router = APIRouter()


@router.get("")
async def my_dashboard(
    session: SessionContext = Depends(get_session),
    client: ClassroomClient = Depends(get_classroom_client),
    db: Session = Depends(get_db),
):
    """Dashboard of whatever role the caller is acting as."""
    return await assembler_for(session.role).assemble(session, client, db)


@router.get("/overview", response_model=DashboardOverview)
async def overview(client: ClassroomClient = Depends(get_classroom_client)):
    return await dashboard_overview(client)
