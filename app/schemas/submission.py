from typing import Optional

from pydantic import BaseModel, Field


class SubmissionGradeUpdate(BaseModel):
    assigned_grade: Optional[float] = Field(default=None, ge=0)
    draft_grade: Optional[float] = Field(default=None, ge=0)
