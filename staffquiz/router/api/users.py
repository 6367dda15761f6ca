from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from staffquiz.database import get_db
from staffquiz.model.users import User
from staffquiz.schema.user_schema import (
    UserOut, EmployeeQuizzesOut, EmployeeQuestionsOut, AnswerSubmission, AttemptOut
)
from staffquiz.router.dependencies import get_current_user, get_current_employee
from staffquiz.router.api.logics.user_logic import (
    get_user_details_logic, get_active_quizzes_logic, get_quiz_questions_logic
)
from staffquiz.router.api.logics.attempt_logic import submit_answer_logic

router = APIRouter()


@router.get("/details", status_code=status.HTTP_200_OK, response_model=UserOut)
async def get_user_details(user: User = Depends(get_current_user)):
    return get_user_details_logic(user)


@router.get("/quizzes",
            response_model=EmployeeQuizzesOut,
            status_code=status.HTTP_200_OK)
async def get_quizzes(db: Session = Depends(get_db),
                      user: User = Depends(get_current_employee)):
    """return the active quizzes together with the user's progress on each

    Returns:
        EmployeeQuizzesOut: active quizzes, newest first
    """
    return get_active_quizzes_logic(db, user)


@router.get("/quizzes/{quiz_id}/questions",
            response_model=EmployeeQuestionsOut,
            status_code=status.HTTP_200_OK)
async def get_questions(quiz_id: int,
                        db: Session = Depends(get_db),
                        user: User = Depends(get_current_employee)):
    """return the questions of an active quiz in order with the user's answer status

    Raises:
        HTTPException: 404 when the quiz does not exist or is not active
    """
    return get_quiz_questions_logic(db, user, quiz_id)


@router.post("/quizzes/{quiz_id}/answer",
             response_model=AttemptOut,
             status_code=status.HTTP_200_OK)
async def submit_answer(quiz_id: int,
                        submission: AnswerSubmission,
                        db: Session = Depends(get_db),
                        user: User = Depends(get_current_employee)):
    """record one answer; answering the same question again replaces the earlier answer

    Raises:
        HTTPException: 404 for an unknown quiz or question, 400 when the quiz is not active
    """
    return submit_answer_logic(db, user, quiz_id, submission)
