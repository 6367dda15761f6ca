"""
In-memory records the scoring and reporting functions work on.

They mirror the stored rows but carry no database state, so the
functions in ``attempt_logic`` and ``report_logic`` can be called on
any snapshot.
"""
from typing import Dict, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnswerRecord(BaseModel):
    selected_answer: str
    is_correct: bool


class AttemptRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    score: int = 0
    total_questions: int = 0
    completed_at: Optional[datetime] = None  # time of the most recent answer
    answers: Dict[str, AnswerRecord] = Field(default_factory=dict)

    @property
    def answered(self) -> int:
        return len(self.answers)

    @property
    def is_completed(self) -> bool:
        return self.total_questions > 0 and len(self.answers) == self.total_questions


class StaffRecord(BaseModel):
    """A roster entry together with its attempts keyed by quiz id."""
    user_id: str
    employee_id: Optional[str] = None
    name: str
    department: str = ""
    role: str = "employee"
    participations: Dict[int, AttemptRecord] = Field(default_factory=dict)
