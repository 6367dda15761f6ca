from sqlalchemy.orm import Session
from sqlalchemy import func
from fastapi import HTTPException, status

from staffquiz.model.users import User
from staffquiz.model.quizzes import Quiz
from staffquiz.model.questions import Question as QuestionModel
from staffquiz.model.attempts import Attempt
from staffquiz.router.api.logics.attempt_logic import to_attempt_record
from staffquiz.router.api.logics.report_logic import percentage_of
from staffquiz.schema.user_schema import (
    UserOut, EmployeeQuizOut, EmployeeQuizzesOut, EmployeeQuestionOut, EmployeeQuestionsOut
)


def get_user_details_logic(user: User) -> UserOut:
    return UserOut(
        user_id=user.user_id,
        employee_id=user.employee_id,
        name=user.name,
        department=user.department or "",
        role=user.role,
    )


def get_active_quizzes_logic(db: Session, user: User) -> EmployeeQuizzesOut:
    """Active quizzes with the user's own progress on each.

    A quiz counts as completed once the answered count reaches the total
    recorded on the attempt. Quizzes not started yet report the live
    question count.
    """
    quizzes = (
        db.query(Quiz)
        .filter(Quiz.is_active == True)  # noqa: E712
        .order_by(Quiz.created_at.desc(), Quiz.quiz_id.desc())
        .all()
    )
    counts = dict(
        db.query(QuestionModel.quiz_id, func.count(QuestionModel.question_id))
        .group_by(QuestionModel.quiz_id)
        .all()
    )
    attempts = {
        a.quiz_id: to_attempt_record(a)
        for a in db.query(Attempt).filter(Attempt.user_id == user.user_id).all()
    }

    res = []
    for q in quizzes:
        attempt = attempts.get(q.quiz_id)
        total = attempt.total_questions if attempt else counts.get(q.quiz_id, 0)
        answered = attempt.answered if attempt else 0
        res.append(EmployeeQuizOut(
            quiz_id=q.quiz_id,
            title=q.title,
            description=q.description,
            total_questions=total,
            answered=answered,
            is_started=attempt is not None,
            is_completed=attempt is not None and total > 0 and answered >= total,
            progress=percentage_of(answered, total) if attempt else 0,
        ))
    return EmployeeQuizzesOut(quizzes=res)


def get_quiz_questions_logic(db: Session, user: User, quiz_id: int) -> EmployeeQuestionsOut:
    """Questions of an active quiz in order, with the user's answer status on each.

    The correct answer of a question is only included once the user has answered it.

    Raises:
        HTTPException: If the quiz does not exist or is not active
    """
    quiz = db.query(Quiz).filter(Quiz.quiz_id == quiz_id, Quiz.is_active == True).first()  # noqa: E712
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")

    questions = (
        db.query(QuestionModel)
        .filter(QuestionModel.quiz_id == quiz_id)
        .order_by(QuestionModel.order.asc())
        .all()
    )
    attempt_row = db.query(Attempt).filter(
        Attempt.user_id == user.user_id,
        Attempt.quiz_id == quiz_id
    ).first()
    answers = to_attempt_record(attempt_row).answers if attempt_row else {}

    res = []
    for q in questions:
        answer = answers.get(str(q.question_id))
        if answer is None:
            res.append(EmployeeQuestionOut(
                question_id=q.question_id, text=q.text, options=q.options, order=q.order, status="pending"
            ))
            continue
        res.append(EmployeeQuestionOut(
            question_id=q.question_id,
            text=q.text,
            options=q.options,
            order=q.order,
            status="correct" if answer.is_correct else "wrong",
            selected_answer=answer.selected_answer,
            correct_answer=q.correct_answer,
        ))

    done = len(answers)
    return EmployeeQuestionsOut(
        quiz_id=quiz.quiz_id,
        title=quiz.title,
        total_questions=len(questions),
        done=done,
        left=max(len(questions) - done, 0),
        questions=res,
    )
