import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.errors import AuthError, ClassroomError
from app.core.session import Role, SessionContext
from app.schemas.result import Result
from app.services.classroom_client import ClassroomClient

logger = logging.getLogger(__name__)


class RoleAssembler:
    """
    Builds the dashboard payload for one role.

    Subclasses implement ``build``; ``assemble`` wraps it so callers always get
    a ``Result`` back. Classroom failures become ``success=False`` with a
    message; anything else propagates.
    """

    role: Role

    def __init__(self, now: Optional[datetime] = None):
        self._now = now

    @property
    def now(self) -> datetime:
        return self._now or datetime.now(timezone.utc)

    async def build(self, client: ClassroomClient, db: Session) -> Any:
        raise NotImplementedError

    async def assemble(self, session: SessionContext, client: ClassroomClient, db: Session) -> Result:
        try:
            session.require()
            data = await self.build(client, db)
        except AuthError as exc:
            logger.info("%s view rejected: %s", self.role.value, exc)
            return Result.fail(str(exc))
        except ClassroomError as exc:
            logger.error("%s view failed: %s", self.role.value, exc)
            return Result.fail(str(exc))
        return Result.ok(data)


def assembler_for(role: Role, now: Optional[datetime] = None) -> RoleAssembler:
    # local imports: the concrete assemblers import this module
    from app.services.assemblers.coordinator import CoordinatorAssembler
    from app.services.assemblers.student import StudentAssembler
    from app.services.assemblers.teacher import TeacherAssembler

    assemblers = {
        Role.student: StudentAssembler,
        Role.teacher: TeacherAssembler,
        Role.coordinator: CoordinatorAssembler,
    }
    return assemblers[Role(role)](now=now)
