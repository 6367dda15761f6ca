from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
from datetime import datetime
from typing import Optional, Union

from staffquiz.model.users import User
from staffquiz.model.quizzes import Quiz
from staffquiz.model.questions import Question as QuestionModel
from staffquiz.model.attempts import Attempt
from staffquiz.schema.attempt_schema import AnswerRecord, AttemptRecord
from staffquiz.schema.user_schema import AnswerSubmission, AttemptOut
from staffquiz.log import get_logger

log = get_logger(__name__)


def record_answer(
    prior_attempt: Optional[AttemptRecord],
    question_id: Union[int, str],
    selected_option: str,
    correct_option: str,
    total_questions_in_quiz: int,
    now: Optional[datetime] = None,
) -> AttemptRecord:
    """Apply one answer to a user's attempt and return the next attempt state.

    Re-answering a question overwrites the earlier answer. The score is
    recounted from the answers every time, so it always matches them.
    The total is taken from the live question count and ``completed_at``
    moves on every answer. Option letters are not validated here; an
    unknown letter just scores as wrong.

    Args:
        prior_attempt (AttemptRecord | None): Current attempt, None on the first answer
        question_id (int | str): Question being answered
        selected_option (str): Letter picked by the user
        correct_option (str): Letter marked correct on the question
        total_questions_in_quiz (int): Live question count of the quiz
        now (datetime, optional): Answer time. Defaults to datetime.now().

    Returns:
        AttemptRecord: A new record; prior_attempt is left untouched.
    """
    if prior_attempt is None:
        prior_attempt = AttemptRecord(score=0, total_questions=total_questions_in_quiz)

    is_correct = selected_option == correct_option
    answers = dict(prior_attempt.answers)
    answers[str(question_id)] = AnswerRecord(selected_answer=selected_option, is_correct=is_correct)
    score = sum(1 for answer in answers.values() if answer.is_correct)

    return AttemptRecord(
        score=score,
        total_questions=total_questions_in_quiz,
        completed_at=now or datetime.now(),
        answers=answers,
    )


def to_attempt_record(attempt: Attempt) -> AttemptRecord:
    return AttemptRecord.model_validate(attempt)


def _load_attempt(db: Session, user_id: str, quiz_id: int) -> Optional[Attempt]:
    return db.query(Attempt).filter(
        Attempt.user_id == user_id,
        Attempt.quiz_id == quiz_id
    ).first()


def _save_answer(
    db: Session,
    user_id: str,
    quiz_id: int,
    question_id: int,
    selected_option: str,
    correct_option: str,
    total_questions: int,
) -> AttemptRecord:
    """Apply one answer to the stored attempt (creating it if needed) and commit."""
    attempt = _load_attempt(db, user_id, quiz_id)
    prior = to_attempt_record(attempt) if attempt else None

    updated = record_answer(prior, question_id, selected_option, correct_option, total_questions)

    if attempt is None:
        attempt = Attempt(user_id=user_id, quiz_id=quiz_id)
        db.add(attempt)
    attempt.score = updated.score
    attempt.total_questions = updated.total_questions
    attempt.completed_at = updated.completed_at
    attempt.answers = {qid: answer.model_dump() for qid, answer in updated.answers.items()}
    db.commit()
    return updated


def submit_answer_logic(
    db: Session,
    user: User,
    quiz_id: int,
    submission: AnswerSubmission,
) -> AttemptOut:
    """Record an employee's answer and persist the updated attempt.

    When another request creates the user's attempt between our read and
    our insert, the insert is rolled back and the answer is applied on top
    of the attempt that won.

    Args:
        db (Session): Database session
        user (User): Current employee
        quiz_id (int): Quiz being taken
        submission (AnswerSubmission): Question id and selected letter

    Returns:
        AttemptOut: The attempt after this answer

    Raises:
        HTTPException: If the quiz or question does not exist, or the quiz is not active
    """
    quiz = db.query(Quiz).filter(Quiz.quiz_id == quiz_id).first()
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    if not quiz.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Quiz is not active")

    question = db.query(QuestionModel).filter(
        QuestionModel.question_id == submission.question_id,
        QuestionModel.quiz_id == quiz_id
    ).first()
    if not question:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found in this quiz")

    total_questions = db.query(func.count(QuestionModel.question_id)).filter(
        QuestionModel.quiz_id == quiz_id
    ).scalar() or 0

    # plain values, the ORM objects expire on rollback
    user_id = user.user_id
    question_id = question.question_id
    answer_args = (user_id, quiz_id, question_id, submission.selected_answer, question.correct_answer, total_questions)
    try:
        updated = _save_answer(db, *answer_args)
    except IntegrityError:
        db.rollback()
        log.warning("attempt of user %s on quiz %s was created concurrently, retrying", user_id, quiz_id)
        updated = _save_answer(db, *answer_args)

    is_correct = updated.answers[str(question_id)].is_correct
    log.info(
        "user %s answered question %s of quiz %s (%s/%s answered, score %s)",
        user_id, question_id, quiz_id,
        updated.answered, updated.total_questions, updated.score,
    )
    return AttemptOut(
        quiz_id=quiz_id,
        score=updated.score,
        total_questions=updated.total_questions,
        answered=updated.answered,
        is_completed=updated.is_completed,
        completed_at=updated.completed_at,
        is_correct=is_correct,
    )
