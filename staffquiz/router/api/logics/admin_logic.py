from sqlalchemy.orm import Session
from sqlalchemy import func
from fastapi import HTTPException, status
from typing import Dict, Any, List

from staffquiz.model.users import User, ROLE_ADMIN, ROLE_EMPLOYEE
from staffquiz.model.quizzes import Quiz
from staffquiz.model.questions import Question as QuestionModel
from staffquiz.router.auth_util import generate_unique_user_id
from staffquiz.router.service.excel_service import parse_staff_workbook, parse_questions_workbook
from staffquiz.schema.admin_schema import (
    StaffCreate, StaffUpdate, StaffOut, StaffListOut, ImportResult,
    QuizCreate, QuizUpdate, QuizOut, QuizzesOut,
    QuestionCreate, QuestionUpdate, QuestionOut, QuestionsOut,
)
from staffquiz.log import get_logger

log = get_logger(__name__)

IMPORT_FAILED = "Import failed. Please check the Excel file format."


#############
### Staff ###
#############
def _get_staff_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(
        User.user_id == user_id,
        User.role != ROLE_ADMIN
    ).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff member not found")
    return user


def _employee_id_taken(db: Session, employee_id: str) -> bool:
    return db.query(User).filter(User.employee_id == employee_id).first() is not None


def list_staff_logic(db: Session) -> StaffListOut:
    """Get every non-admin user, ordered by name."""
    staff = db.query(User).filter(User.role != ROLE_ADMIN).order_by(User.name.asc()).all()
    return StaffListOut(staff=[StaffOut.model_validate(s) for s in staff])


def create_staff_logic(db: Session, staff: StaffCreate) -> Dict[str, Any]:
    """Create an employee record.

    Args:
        db (Session): Database session
        staff (StaffCreate): Employee id, name and department

    Returns:
        Dict[str, Any]: Success message with created user_id

    Raises:
        HTTPException: If the employee id is already used
    """
    if _employee_id_taken(db, staff.employee_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Employee ID already exists"
        )

    new_staff = User(
        user_id=generate_unique_user_id(db),
        employee_id=staff.employee_id,
        name=staff.name,
        department=staff.department.strip(),
        role=ROLE_EMPLOYEE,
    )
    db.add(new_staff)
    db.commit()
    db.refresh(new_staff)
    log.info("created staff member %s (%s)", new_staff.user_id, new_staff.employee_id)

    return {"message": "Staff member created successfully", "user_id": new_staff.user_id}


def update_staff_logic(db: Session, user_id: str, staff_update: StaffUpdate) -> Dict[str, str]:
    """Update name, employee id and/or department of a staff member.

    Raises:
        HTTPException: If the staff member is not found or the new employee id is taken
    """
    staff = _get_staff_or_404(db, user_id)

    if staff_update.employee_id is not None:
        new_employee_id = staff_update.employee_id.strip()
        if not new_employee_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Employee ID must not be blank")
        if new_employee_id != staff.employee_id and _employee_id_taken(db, new_employee_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Employee ID already exists"
            )
        staff.employee_id = new_employee_id

    # Update only provided fields
    if staff_update.name is not None:
        if not staff_update.name.strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name must not be blank")
        staff.name = staff_update.name.strip()
    if staff_update.department is not None:
        staff.department = staff_update.department.strip()

    db.commit()
    return {"message": "Staff information updated successfully"}


def delete_staff_logic(db: Session, user_id: str) -> Dict[str, str]:
    """Delete a staff member together with their attempts."""
    staff = _get_staff_or_404(db, user_id)
    db.delete(staff)
    db.commit()
    log.info("deleted staff member %s", user_id)
    return {"message": "Staff member deleted successfully"}


def import_staff_logic(db: Session, content: bytes) -> ImportResult:
    """Create staff members from an uploaded spreadsheet.

    Rows without an employee id or name, and rows whose employee id
    already exists (in the database or earlier in the file), are skipped.

    Raises:
        HTTPException: If the file can't be read or holds no valid rows
    """
    try:
        parsed, skipped = parse_staff_workbook(content)
    except ValueError as e:
        log.error("staff import failed: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=IMPORT_FAILED) from e

    if not parsed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid users found in file. Please ensure columns match: Employee ID, Name, Department"
        )

    existing = {
        row[0] for row in db.query(User.employee_id).filter(User.employee_id.isnot(None)).all()
    }
    imported = 0
    for row in parsed:
        if row["employee_id"] in existing:
            skipped += 1
            continue
        existing.add(row["employee_id"])
        db.add(User(
            user_id=generate_unique_user_id(db),
            employee_id=row["employee_id"],
            name=row["name"],
            department=row["department"],
            role=ROLE_EMPLOYEE,
        ))
        db.flush()  # so generate_unique_user_id sees the ids handed out so far
        imported += 1
    db.commit()
    log.info("imported %s staff members (%s skipped)", imported, skipped)

    return ImportResult(
        message=f"Successfully imported {imported} users.",
        imported=imported,
        skipped=skipped,
    )


############
### Quiz ###
############
def _get_quiz_or_404(db: Session, quiz_id: int) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.quiz_id == quiz_id).first()
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return quiz


def _question_count(db: Session, quiz_id: int) -> int:
    return db.query(func.count(QuestionModel.question_id)).filter(
        QuestionModel.quiz_id == quiz_id
    ).scalar() or 0


def _quiz_out(quiz: Quiz, question_count: int) -> QuizOut:
    return QuizOut(
        quiz_id=quiz.quiz_id,
        title=quiz.title,
        description=quiz.description,
        is_active=quiz.is_active,
        created_at=quiz.created_at,
        question_count=question_count,
    )


def list_quizzes_logic(db: Session) -> QuizzesOut:
    """All quizzes, newest first, with their question counts."""
    counts = dict(
        db.query(QuestionModel.quiz_id, func.count(QuestionModel.question_id))
        .group_by(QuestionModel.quiz_id)
        .all()
    )
    quizzes = db.query(Quiz).order_by(Quiz.created_at.desc(), Quiz.quiz_id.desc()).all()
    return QuizzesOut(quizzes=[_quiz_out(q, counts.get(q.quiz_id, 0)) for q in quizzes])


def create_quiz_logic(db: Session, quiz: QuizCreate, admin: User) -> QuizOut:
    new_quiz = Quiz(
        title=quiz.title,
        description=quiz.description,
        is_active=quiz.is_active,
        creator_id=admin.user_id,
    )
    db.add(new_quiz)
    db.commit()
    db.refresh(new_quiz)
    log.info("admin %s created quiz %s '%s'", admin.user_id, new_quiz.quiz_id, new_quiz.title)
    return _quiz_out(new_quiz, 0)


def update_quiz_logic(db: Session, quiz_id: int, quiz_update: QuizUpdate) -> QuizOut:
    """Rename a quiz, change its description, or publish/stop it.

    Raises:
        HTTPException: If the quiz is not found or the new title is blank
    """
    quiz = _get_quiz_or_404(db, quiz_id)

    if quiz_update.title is not None:
        if not quiz_update.title.strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title must not be blank")
        quiz.title = quiz_update.title.strip()
    if quiz_update.description is not None:
        quiz.description = quiz_update.description
    if quiz_update.is_active is not None:
        quiz.is_active = quiz_update.is_active
        log.info("quiz %s is now %s", quiz_id, "active" if quiz.is_active else "stopped")

    db.commit()
    db.refresh(quiz)
    return _quiz_out(quiz, _question_count(db, quiz_id))


def delete_quiz_logic(db: Session, quiz_id: int) -> Dict[str, str]:
    """Delete a quiz; its questions and every attempt on it go with it."""
    quiz = _get_quiz_or_404(db, quiz_id)
    db.delete(quiz)
    db.commit()
    log.info("deleted quiz %s", quiz_id)
    return {"message": "Quiz deleted successfully"}


################
### Question ###
################
def _get_question_or_404(db: Session, question_id: int) -> QuestionModel:
    question = db.query(QuestionModel).filter(QuestionModel.question_id == question_id).first()
    if not question:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    return question


def list_questions_logic(db: Session, quiz_id: int) -> QuestionsOut:
    _get_quiz_or_404(db, quiz_id)
    questions = (
        db.query(QuestionModel)
        .filter(QuestionModel.quiz_id == quiz_id)
        .order_by(QuestionModel.order.asc())
        .all()
    )
    return QuestionsOut(questions=[QuestionOut.model_validate(q) for q in questions])


def add_question_logic(db: Session, quiz_id: int, question: QuestionCreate) -> QuestionOut:
    """Append a question to the end of a quiz."""
    _get_quiz_or_404(db, quiz_id)
    new_question = QuestionModel(
        quiz_id=quiz_id,
        text=question.text,
        options=question.options.model_dump(),
        correct_answer=question.correct_answer,
        order=_question_count(db, quiz_id) + 1,
    )
    db.add(new_question)
    db.commit()
    db.refresh(new_question)
    return QuestionOut.model_validate(new_question)


def update_question_logic(db: Session, question_id: int, question_update: QuestionUpdate) -> QuestionOut:
    question = _get_question_or_404(db, question_id)
    if question_update.text is not None:
        question.text = question_update.text
    if question_update.options is not None:
        question.options = question_update.options.model_dump()
    if question_update.correct_answer is not None:
        question.correct_answer = question_update.correct_answer
    db.commit()
    db.refresh(question)
    return QuestionOut.model_validate(question)


def delete_question_logic(db: Session, question_id: int) -> Dict[str, str]:
    """Delete a question and close the gap it leaves in the ordering."""
    question = _get_question_or_404(db, question_id)
    quiz_id = question.quiz_id
    db.delete(question)
    db.flush()

    remaining: List[QuestionModel] = (
        db.query(QuestionModel)
        .filter(QuestionModel.quiz_id == quiz_id)
        .order_by(QuestionModel.order.asc())
        .all()
    )
    for position, q in enumerate(remaining, start=1):
        q.order = position
    db.commit()
    return {"message": "Question deleted successfully"}


def import_questions_logic(db: Session, quiz_id: int, content: bytes) -> ImportResult:
    """Append questions from an uploaded spreadsheet after the existing ones.

    Raises:
        HTTPException: If the quiz is missing, or the file can't be read or holds no valid rows
    """
    _get_quiz_or_404(db, quiz_id)
    try:
        parsed, skipped = parse_questions_workbook(content)
    except ValueError as e:
        log.error("question import for quiz %s failed: %s", quiz_id, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=IMPORT_FAILED) from e

    if not parsed:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid questions found.")

    current_count = _question_count(db, quiz_id)
    for row in parsed:
        db.add(QuestionModel(
            quiz_id=quiz_id,
            text=row["text"],
            options=row["options"],
            correct_answer=row["correct_answer"],
            order=current_count + row["order"],
        ))
    db.commit()
    log.info("imported %s questions into quiz %s (%s skipped)", len(parsed), quiz_id, skipped)

    return ImportResult(
        message=f"Successfully imported {len(parsed)} questions.",
        imported=len(parsed),
        skipped=skipped,
    )
