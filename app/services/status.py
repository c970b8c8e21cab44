from datetime import datetime, timezone
from typing import Optional

from app.schemas.classroom import CourseWork, StudentSubmission

PENDING = "pending"
SUBMITTED = "submitted"
GRADED = "graded"
RETURNED = "returned"
LATE = "late"


def classify_assignment(
    assignment: CourseWork,
    submission: Optional[StudentSubmission],
    now: Optional[datetime] = None,
) -> str:
    """
    Single status label for one assignment from one student's point of view.

    First match wins:
      1. no submission, due date passed       -> late
      2. no submission                        -> pending
      3. state RETURNED                       -> returned
      4. assigned grade present               -> graded
      5. state TURNED_IN / RETURNED           -> submitted
      6. late flag set                        -> late
      7. anything else                        -> pending
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if submission is None:
        due = assignment.due_at
        if due is not None and now > due:
            return LATE
        return PENDING

    if submission.state == "RETURNED":
        return RETURNED
    if submission.assigned_grade is not None:
        return GRADED
    if submission.is_submitted:
        return SUBMITTED
    if submission.late:
        return LATE
    return PENDING
