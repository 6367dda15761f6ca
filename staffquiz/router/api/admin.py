from fastapi import APIRouter, Depends, status, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
from staffquiz.database import get_db
from staffquiz.model.users import User
from staffquiz.schema.admin_schema import (
    StaffCreate, StaffUpdate, StaffListOut, ImportResult,
    QuizCreate, QuizUpdate, QuizOut, QuizzesOut,
    QuestionCreate, QuestionUpdate, QuestionOut, QuestionsOut,
)
from staffquiz.schema.report_schema import ReportStats
from staffquiz.router.dependencies import get_current_admin
from staffquiz.router.api.logics.admin_logic import (
    list_staff_logic, create_staff_logic, update_staff_logic, delete_staff_logic, import_staff_logic,
    list_quizzes_logic, create_quiz_logic, update_quiz_logic, delete_quiz_logic,
    list_questions_logic, add_question_logic, update_question_logic, delete_question_logic,
    import_questions_logic,
)
from staffquiz.router.api.logics.report_logic import (
    get_report_logic, export_report_logic, reset_progress_logic
)
from staffquiz.router.service.excel_service import staff_template, question_template

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _xlsx_response(content: bytes, file_name: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


#############
### Staff ###
#############
@router.get("/staff", response_model=StaffListOut, status_code=status.HTTP_200_OK)
async def get_staff(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    """list every staff member (admins excluded), ordered by name"""
    return list_staff_logic(db)


@router.post("/staff", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_staff(staff: StaffCreate,
                       db: Session = Depends(get_db),
                       admin: User = Depends(get_current_admin)):
    """create an employee with an employee ID, a name and a department

    Raises:
        HTTPException: 400 when the employee ID already exists
    """
    return create_staff_logic(db, staff)


@router.patch("/staff/{user_id}", response_model=dict, status_code=status.HTTP_200_OK)
async def update_staff(user_id: str,
                       staff_update: StaffUpdate,
                       db: Session = Depends(get_db),
                       admin: User = Depends(get_current_admin)):
    return update_staff_logic(db, user_id, staff_update)


@router.delete("/staff/{user_id}", response_model=dict, status_code=status.HTTP_200_OK)
async def delete_staff(user_id: str,
                       db: Session = Depends(get_db),
                       admin: User = Depends(get_current_admin)):
    return delete_staff_logic(db, user_id)


@router.post("/staff/import", response_model=ImportResult, status_code=status.HTTP_201_CREATED)
async def import_staff(file: UploadFile = File(...),
                       db: Session = Depends(get_db),
                       admin: User = Depends(get_current_admin)):
    """import staff from an .xlsx file with the columns Employee ID, Name, Department"""
    content = await file.read()
    return import_staff_logic(db, content)


@router.get("/staff/template", status_code=status.HTTP_200_OK)
async def download_staff_template(admin: User = Depends(get_current_admin)):
    return _xlsx_response(staff_template(), "Staff_Import_Template.xlsx")


###############
### Quizzes ###
###############
@router.get("/quizzes", response_model=QuizzesOut, status_code=status.HTTP_200_OK)
async def get_quizzes(db: Session = Depends(get_db), admin: User = Depends(get_current_admin)):
    """list every quiz, newest first"""
    return list_quizzes_logic(db)


@router.post("/quizzes", response_model=QuizOut, status_code=status.HTTP_201_CREATED)
async def create_quiz(quiz: QuizCreate,
                      db: Session = Depends(get_db),
                      admin: User = Depends(get_current_admin)):
    return create_quiz_logic(db, quiz, admin)


@router.patch("/quizzes/{quiz_id}", response_model=QuizOut, status_code=status.HTTP_200_OK)
async def update_quiz(quiz_id: int,
                      quiz_update: QuizUpdate,
                      db: Session = Depends(get_db),
                      admin: User = Depends(get_current_admin)):
    """rename a quiz, change its description, or publish / stop it"""
    return update_quiz_logic(db, quiz_id, quiz_update)


@router.delete("/quizzes/{quiz_id}", response_model=dict, status_code=status.HTTP_200_OK)
async def delete_quiz(quiz_id: int,
                      db: Session = Depends(get_db),
                      admin: User = Depends(get_current_admin)):
    """delete a quiz with its questions and all attempts on it"""
    return delete_quiz_logic(db, quiz_id)


#################
### Questions ###
#################
@router.get("/quizzes/{quiz_id}/questions", response_model=QuestionsOut, status_code=status.HTTP_200_OK)
async def get_questions(quiz_id: int,
                        db: Session = Depends(get_db),
                        admin: User = Depends(get_current_admin)):
    return list_questions_logic(db, quiz_id)


@router.post("/quizzes/{quiz_id}/questions", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
async def add_question(quiz_id: int,
                       question: QuestionCreate,
                       db: Session = Depends(get_db),
                       admin: User = Depends(get_current_admin)):
    return add_question_logic(db, quiz_id, question)


@router.post("/quizzes/{quiz_id}/questions/import", response_model=ImportResult, status_code=status.HTTP_201_CREATED)
async def import_questions(quiz_id: int,
                           file: UploadFile = File(...),
                           db: Session = Depends(get_db),
                           admin: User = Depends(get_current_admin)):
    """append questions from an .xlsx file with the columns
    Question, Option A-D, Correct Answer"""
    content = await file.read()
    return import_questions_logic(db, quiz_id, content)


@router.get("/questions/template", status_code=status.HTTP_200_OK)
async def download_question_template(admin: User = Depends(get_current_admin)):
    return _xlsx_response(question_template(), "Quiz_Questions_Template.xlsx")


@router.patch("/questions/{question_id}", response_model=QuestionOut, status_code=status.HTTP_200_OK)
async def update_question(question_id: int,
                          question_update: QuestionUpdate,
                          db: Session = Depends(get_db),
                          admin: User = Depends(get_current_admin)):
    return update_question_logic(db, question_id, question_update)


@router.delete("/questions/{question_id}", response_model=dict, status_code=status.HTTP_200_OK)
async def delete_question(question_id: int,
                          db: Session = Depends(get_db),
                          admin: User = Depends(get_current_admin)):
    return delete_question_logic(db, question_id)


###############
### Reports ###
###############
@router.get("/reports/{quiz_id}", response_model=ReportStats, status_code=status.HTTP_200_OK)
async def get_report(quiz_id: int,
                     db: Session = Depends(get_db),
                     admin: User = Depends(get_current_admin)):
    """completion, average score, pass rate, department ranking, score
    distribution and per-question difficulty of a quiz"""
    return get_report_logic(db, quiz_id)


@router.get("/reports/{quiz_id}/export", status_code=status.HTTP_200_OK)
async def export_report(quiz_id: int,
                        db: Session = Depends(get_db),
                        admin: User = Depends(get_current_admin)):
    return _xlsx_response(export_report_logic(db, quiz_id), "Quiz_Report.xlsx")


@router.delete("/reports/{quiz_id}/participants/{user_id}", response_model=dict, status_code=status.HTTP_200_OK)
async def reset_progress(quiz_id: int,
                         user_id: str,
                         db: Session = Depends(get_db),
                         admin: User = Depends(get_current_admin)):
    """drop a user's attempt on a quiz so they can start over"""
    return reset_progress_logic(db, quiz_id, user_id)
