# import models so Base.metadata knows every table
from app.db.base_class import Base  # noqa: F401
from app.models.teacher_assignment import TeacherAssignment  # noqa: F401
