from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel


class ScoreBucket(BaseModel):
    name: str
    upper_bound: int
    count: int = 0


class DeptStat(BaseModel):
    name: str
    avg: int
    count: int


class QuestionAnalysis(BaseModel):
    question_id: int
    text: str
    order: int
    correct_answer: str
    correct_rate: int
    attempts: int


class ParticipantRow(BaseModel):
    user_id: str
    employee_id: Optional[str] = None
    name: str
    department: str
    score: int
    total_questions: int
    answered: int
    percentage: int
    is_completed: bool
    completed_at: Optional[datetime] = None


class ReportStats(BaseModel):
    total_completed: int
    avg_score: int
    pass_rate: int
    top_dept: str
    all_participants: List[ParticipantRow]
    max_score_possible: int
    score_distribution: List[ScoreBucket]
    dept_chart_data: List[DeptStat]
    question_analysis_data: List[QuestionAnalysis]
