from typing import AsyncIterator

from fastapi import Depends

from app.core.current_user import get_session
from app.core.session import SessionContext
from app.db.session import SessionLocal
from app.services.classroom_client import ClassroomClient


# every request that needs DB will get a fresh session, and it will always close.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# one Classroom client per request, bound to the caller's token
async def get_classroom_client(session: SessionContext = Depends(get_session)) -> AsyncIterator[ClassroomClient]:
    async with ClassroomClient(session.require()) as client:
        yield client


# transport for the Google OAuth endpoints; None means the real network
def get_oauth_transport():
    return None
