"""
Quiz report aggregation.

``aggregate_report`` and ``build_export_rows`` are pure functions over a
roster snapshot; the ``*_logic`` functions below load that snapshot from
the database and hand it to them. Nothing is cached: every report view
and export recomputes from the current rows.
"""
import math
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session, selectinload
from fastapi import HTTPException, status

from staffquiz.model.users import User, ROLE_ADMIN
from staffquiz.model.quizzes import Quiz
from staffquiz.model.questions import Question as QuestionModel
from staffquiz.model.attempts import Attempt
from staffquiz.router.api.logics.attempt_logic import to_attempt_record
from staffquiz.router.service.excel_service import build_workbook
from staffquiz.schema.admin_schema import QuestionOut
from staffquiz.schema.attempt_schema import StaffRecord
from staffquiz.schema.report_schema import (
    DeptStat, ParticipantRow, QuestionAnalysis, ReportStats, ScoreBucket
)
from staffquiz.log import get_logger

log = get_logger(__name__)

PASS_MARK = 50
UNKNOWN_DEPARTMENT = "Unknown"
# (inclusive upper bound, label); anything above the previous bound lands in the next bucket
SCORE_BUCKETS = (
    (20, "0-20%"),
    (40, "21-40%"),
    (60, "41-60%"),
    (80, "61-80%"),
    (100, "81-100%"),
)

EXPORT_COLUMNS = ["Employee ID", "Name", "Department", "Status", "Score", "Date"]
EXPORT_DATE_FORMAT = "%Y-%m-%d"
STATUS_COMPLETED = "Completed"
STATUS_IN_PROGRESS = "In Progress"
STATUS_NOT_STARTED = "Not Started"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def percentage_of(part: int, whole: int) -> int:
    return round_half_up(100 * part / whole) if whole else 0


def _bucket_index(percentage: int) -> int:
    for idx, (upper_bound, _) in enumerate(SCORE_BUCKETS[:-1]):
        if percentage <= upper_bound:
            return idx
    return len(SCORE_BUCKETS) - 1


def aggregate_report(
    users: Iterable[StaffRecord],
    quiz_id: Optional[int],
    questions: Sequence[QuestionOut],
) -> Optional[ReportStats]:
    """Compute the report view-model for one quiz.

    Only fully completed attempts count towards the statistics;
    all_participants also lists attempts still in progress. Ties in the
    department and question rankings keep their input order.

    Args:
        users (Iterable[StaffRecord]): Roster with participations
        quiz_id (int | None): Quiz to report on
        questions (Sequence[QuestionOut]): The quiz's questions in order

    Returns:
        ReportStats | None: None when no quiz is selected
    """
    if not quiz_id:
        return None

    participants = [u for u in users if quiz_id in u.participations]
    completed = [u for u in participants if u.participations[quiz_id].is_completed]
    total_completed = len(completed)

    # assumes every completed attempt was taken against the same question count
    max_score_possible = completed[0].participations[quiz_id].total_questions if completed else 0

    total_score = 0
    passed_count = 0
    dept_totals: Dict[str, List[int]] = {}  # dept -> [sum of percentages, count]
    question_totals: Dict[str, List[int]] = {}  # question id -> [correct, attempts]
    buckets = [ScoreBucket(name=label, upper_bound=bound) for bound, label in SCORE_BUCKETS]

    for user in completed:
        attempt = user.participations[quiz_id]
        # the rounded percentage decides pass and bucket, so 49.5% passes
        percentage = percentage_of(attempt.score, attempt.total_questions)
        total_score += attempt.score
        if percentage >= PASS_MARK:
            passed_count += 1

        totals = dept_totals.setdefault(user.department or UNKNOWN_DEPARTMENT, [0, 0])
        totals[0] += percentage
        totals[1] += 1

        buckets[_bucket_index(percentage)].count += 1

        for question_id, answer in attempt.answers.items():
            stats = question_totals.setdefault(question_id, [0, 0])
            stats[1] += 1
            if answer.is_correct:
                stats[0] += 1

    if total_completed > 0 and max_score_possible > 0:
        avg_score = round_half_up(100 * total_score / (total_completed * max_score_possible))
    else:
        avg_score = 0
    pass_rate = percentage_of(passed_count, total_completed)

    dept_chart_data = sorted(
        (DeptStat(name=name, avg=round_half_up(total / count), count=count)
         for name, (total, count) in dept_totals.items()),
        key=lambda d: d.avg,
        reverse=True,
    )
    top_dept = dept_chart_data[0].name if dept_chart_data else "-"

    question_analysis_data = []
    for q in questions:
        correct, attempts = question_totals.get(str(q.question_id), [0, 0])
        question_analysis_data.append(QuestionAnalysis(
            question_id=q.question_id,
            text=q.text,
            order=q.order,
            correct_answer=q.correct_answer,
            correct_rate=percentage_of(correct, attempts),
            attempts=attempts,
        ))
    question_analysis_data.sort(key=lambda q: q.correct_rate)

    all_participants = []
    for user in participants:
        attempt = user.participations[quiz_id]
        all_participants.append(ParticipantRow(
            user_id=user.user_id,
            employee_id=user.employee_id,
            name=user.name,
            department=user.department,
            score=attempt.score,
            total_questions=attempt.total_questions,
            answered=attempt.answered,
            percentage=percentage_of(attempt.score, attempt.total_questions),
            is_completed=attempt.is_completed,
            completed_at=attempt.completed_at,
        ))

    return ReportStats(
        total_completed=total_completed,
        avg_score=avg_score,
        pass_rate=pass_rate,
        top_dept=top_dept,
        all_participants=all_participants,
        max_score_possible=max_score_possible,
        score_distribution=buckets,
        dept_chart_data=dept_chart_data,
        question_analysis_data=question_analysis_data,
    )


def build_export_rows(users: Iterable[StaffRecord], quiz_id: int) -> List[Dict[str, str]]:
    """One flat row per roster user, whether or not they took the quiz."""
    rows = []
    for user in users:
        attempt = user.participations.get(quiz_id)
        if attempt is None:
            status_label = STATUS_NOT_STARTED
        elif attempt.is_completed:
            status_label = STATUS_COMPLETED
        else:
            status_label = STATUS_IN_PROGRESS
        rows.append({
            "Employee ID": user.employee_id or "",
            "Name": user.name,
            "Department": user.department,
            "Status": status_label,
            "Score": f"{attempt.score}/{attempt.total_questions}" if attempt else "-",
            "Date": attempt.completed_at.strftime(EXPORT_DATE_FORMAT)
            if attempt and attempt.completed_at else "-",
        })
    return rows


###################
### DB wrappers ###
###################
def to_staff_record(user: User) -> StaffRecord:
    return StaffRecord(
        user_id=user.user_id,
        employee_id=user.employee_id,
        name=user.name,
        department=user.department or "",
        role=user.role,
        participations={a.quiz_id: to_attempt_record(a) for a in user.attempts},
    )


def load_roster(db: Session) -> List[StaffRecord]:
    """Every non-admin user with their attempts."""
    users = (
        db.query(User)
        .options(selectinload(User.attempts))
        .filter(User.role != ROLE_ADMIN)
        .order_by(User.name.asc(), User.user_id.asc())
        .all()
    )
    return [to_staff_record(u) for u in users]


def load_questions(db: Session, quiz_id: int) -> List[QuestionOut]:
    questions = (
        db.query(QuestionModel)
        .filter(QuestionModel.quiz_id == quiz_id)
        .order_by(QuestionModel.order.asc())
        .all()
    )
    return [QuestionOut.model_validate(q) for q in questions]


def _get_quiz_or_404(db: Session, quiz_id: int) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.quiz_id == quiz_id).first()
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return quiz


def get_report_logic(db: Session, quiz_id: int) -> ReportStats:
    """Report statistics for a quiz, recomputed from the current data.

    Raises:
        HTTPException: If the quiz does not exist
    """
    _get_quiz_or_404(db, quiz_id)
    return aggregate_report(load_roster(db), quiz_id, load_questions(db, quiz_id))


def export_report_logic(db: Session, quiz_id: int) -> bytes:
    """The export rows of a quiz as an .xlsx workbook."""
    _get_quiz_or_404(db, quiz_id)
    rows = build_export_rows(load_roster(db), quiz_id)
    log.info("exporting report for quiz %s (%s rows)", quiz_id, len(rows))
    return build_workbook(rows, EXPORT_COLUMNS, "Report")


def reset_progress_logic(db: Session, quiz_id: int, user_id: str) -> Dict[str, str]:
    """Drop one user's attempt so they can take the quiz again.

    Raises:
        HTTPException: If the user has no attempt for the quiz
    """
    attempt = db.query(Attempt).filter(
        Attempt.quiz_id == quiz_id,
        Attempt.user_id == user_id
    ).first()
    if not attempt:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No progress found for this user")

    db.delete(attempt)
    db.commit()
    log.info("reset progress of user %s on quiz %s", user_id, quiz_id)
    return {"message": "Progress reset successfully"}
