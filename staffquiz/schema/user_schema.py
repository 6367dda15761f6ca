from pydantic import BaseModel
from typing import Optional, List, Dict, Literal
from datetime import datetime


class UserOut(BaseModel):
    user_id: str
    employee_id: Optional[str]
    name: str
    department: str
    role: str


############
### Quiz ###
############
class EmployeeQuizOut(BaseModel):
    quiz_id: int
    title: str
    description: Optional[str] = None
    total_questions: int
    answered: int
    is_started: bool
    is_completed: bool
    progress: int  # percent of questions answered


class EmployeeQuizzesOut(BaseModel):
    quizzes: List[EmployeeQuizOut]


################
### Question ###
################
class EmployeeQuestionOut(BaseModel):
    question_id: int
    text: str
    options: Dict[str, str]
    order: int
    status: Literal["pending", "correct", "wrong"]
    selected_answer: Optional[str] = None
    correct_answer: Optional[str] = None  # only revealed once answered


class EmployeeQuestionsOut(BaseModel):
    quiz_id: int
    title: str
    total_questions: int
    done: int
    left: int
    questions: List[EmployeeQuestionOut]


###############
### Answers ###
###############
class AnswerSubmission(BaseModel):
    question_id: int
    selected_answer: Literal["A", "B", "C", "D"]


class AttemptOut(BaseModel):
    quiz_id: int
    score: int
    total_questions: int
    answered: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    is_correct: bool
