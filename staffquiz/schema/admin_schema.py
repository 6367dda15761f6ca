from typing import Optional, List, Dict, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator

OptionLetter = Literal["A", "B", "C", "D"]


#############
### Staff ###
#############
class StaffCreate(BaseModel):
    employee_id: str
    name: str
    department: str = ""

    @field_validator("employee_id", "name")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class StaffUpdate(BaseModel):
    employee_id: Optional[str] = None
    name: Optional[str] = None
    department: Optional[str] = None


class StaffOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    employee_id: Optional[str]
    name: str
    department: str
    created_at: Optional[datetime] = None


class StaffListOut(BaseModel):
    staff: List[StaffOut]


class ImportResult(BaseModel):
    message: str
    imported: int
    skipped: int = 0


############
### Quiz ###
############
class QuizCreate(BaseModel):
    title: str
    description: Optional[str] = None
    is_active: bool = False

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class QuizUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class QuizOut(BaseModel):
    quiz_id: int
    title: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    question_count: int


class QuizzesOut(BaseModel):
    quizzes: List[QuizOut]


################
### Question ###
################
class QuestionOptions(BaseModel):
    A: str
    B: str
    C: str
    D: str

    @field_validator("A", "B", "C", "D")
    @classmethod
    def option_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("option must not be blank")
        return v


class QuestionCreate(BaseModel):
    text: str
    options: QuestionOptions
    correct_answer: OptionLetter = "A"

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question text must not be blank")
        return v


class QuestionUpdate(BaseModel):
    text: Optional[str] = None
    options: Optional[QuestionOptions] = None
    correct_answer: Optional[OptionLetter] = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("question text must not be blank")
        return v


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_id: int
    quiz_id: int
    text: str
    options: Dict[str, str]
    correct_answer: str
    order: int


class QuestionsOut(BaseModel):
    questions: List[QuestionOut]
