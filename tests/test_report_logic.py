from datetime import datetime

from staffquiz.router.api.logics.attempt_logic import record_answer
from staffquiz.router.api.logics.report_logic import (
    aggregate_report, build_export_rows, round_half_up, SCORE_BUCKETS
)
from staffquiz.schema.admin_schema import QuestionOut
from staffquiz.schema.attempt_schema import AnswerRecord, AttemptRecord, StaffRecord

QUIZ_ID = 1
NOW = datetime(2026, 3, 2, 9, 30)


def question(question_id: int, correct: str = "A") -> QuestionOut:
    return QuestionOut(
        question_id=question_id,
        quiz_id=QUIZ_ID,
        text=f"Question {question_id}",
        options={"A": "a", "B": "b", "C": "c", "D": "d"},
        correct_answer=correct,
        order=question_id,
    )


def attempt(results: str, total: int = None) -> AttemptRecord:
    """results: one character per answered question, 'y' correct and 'n' wrong"""
    answers = {
        str(idx): AnswerRecord(selected_answer="A" if r == "y" else "B", is_correct=r == "y")
        for idx, r in enumerate(results, start=1)
    }
    return AttemptRecord(
        score=results.count("y"),
        total_questions=len(results) if total is None else total,
        completed_at=NOW,
        answers=answers,
    )


def staff(user_id: str, department: str = "Sales", record: AttemptRecord = None) -> StaffRecord:
    return StaffRecord(
        user_id=user_id,
        employee_id=f"EMP-{user_id}",
        name=f"User {user_id}",
        department=department,
        participations={QUIZ_ID: record} if record is not None else {},
    )


def test_no_quiz_selected_gives_no_report():
    users = [staff("u1", record=attempt("yy"))]

    assert aggregate_report(users, None, [question(1)]) is None
    assert aggregate_report(users, 0, [question(1)]) is None


def test_quiz_without_participants():
    stats = aggregate_report([staff("u1"), staff("u2")], QUIZ_ID, [question(1), question(2)])

    assert stats.total_completed == 0
    assert stats.avg_score == 0
    assert stats.pass_rate == 0
    assert stats.top_dept == "-"
    assert stats.max_score_possible == 0
    assert stats.all_participants == []
    assert stats.dept_chart_data == []
    assert [b.count for b in stats.score_distribution] == [0, 0, 0, 0, 0]
    assert [b.name for b in stats.score_distribution] == [label for _, label in SCORE_BUCKETS]
    assert [(q.correct_rate, q.attempts) for q in stats.question_analysis_data] == [(0, 0), (0, 0)]


def test_two_question_scenario():
    questions = [question(1, "A"), question(2, "B")]
    record = record_answer(None, 1, "A", "A", 2, now=NOW)
    record = record_answer(record, 2, "C", "B", 2, now=NOW)
    assert record.score == 1 and record.total_questions == 2 and record.is_completed

    stats = aggregate_report([staff("u1", record=record)], QUIZ_ID, questions)

    assert stats.total_completed == 1
    assert stats.max_score_possible == 2
    assert stats.avg_score == 50
    assert stats.pass_rate == 100
    assert stats.all_participants[0].percentage == 50
    buckets = {b.name: b.count for b in stats.score_distribution}
    assert buckets == {"0-20%": 0, "21-40%": 0, "41-60%": 1, "61-80%": 0, "81-100%": 0}
    assert [(q.question_id, q.correct_rate) for q in stats.question_analysis_data] == [(2, 0), (1, 100)]


def test_in_progress_attempts_are_listed_but_not_counted():
    users = [
        staff("u1", record=attempt("yy")),
        staff("u2", record=attempt("y", total=2)),
        staff("u3"),
    ]

    stats = aggregate_report(users, QUIZ_ID, [question(1), question(2)])

    assert stats.total_completed == 1
    assert [p.user_id for p in stats.all_participants] == ["u1", "u2"]
    in_progress = stats.all_participants[1]
    assert not in_progress.is_completed
    assert in_progress.answered == 1
    # the in-progress answer is not part of the question statistics
    assert {q.question_id: q.attempts for q in stats.question_analysis_data} == {1: 1, 2: 1}


def test_zero_total_attempt_is_never_completed():
    users = [staff("u1", record=AttemptRecord(score=0, total_questions=0, answers={}))]

    stats = aggregate_report(users, QUIZ_ID, [])

    assert stats.total_completed == 0
    assert stats.all_participants[0].percentage == 0


def test_histogram_bucket_bounds_are_inclusive():
    # percentages 0, 20, 40, 60, 80, 100
    users = [staff(f"u{score}", record=attempt("y" * score + "n" * (5 - score))) for score in range(6)]

    stats = aggregate_report(users, QUIZ_ID, [])

    assert [b.count for b in stats.score_distribution] == [2, 1, 1, 1, 1]
    assert sum(b.count for b in stats.score_distribution) == stats.total_completed == 6


def test_pass_mark_is_fifty_percent():
    users = [
        staff("u1", record=attempt("yn")),    # 50
        staff("u2", record=attempt("ynn")),   # 33
        staff("u3", record=attempt("yyn")),   # 67
        staff("u4", record=attempt("nnnn")),  # 0
    ]

    stats = aggregate_report(users, QUIZ_ID, [])

    assert stats.pass_rate == 50


def test_average_score_is_normalised_by_shared_max():
    users = [
        staff("u1", record=attempt("yyyy")),
        staff("u2", record=attempt("ynnn")),
        staff("u3", record=attempt("yynn")),
    ]

    stats = aggregate_report(users, QUIZ_ID, [])

    # 7 correct out of 3 * 4
    assert stats.avg_score == 58
    assert stats.max_score_possible == 4


def test_half_percentages_round_up():
    stats = aggregate_report([staff("u1", record=attempt("ynnnnnnn"))], QUIZ_ID, [])

    assert stats.avg_score == 13  # 12.5
    assert stats.all_participants[0].percentage == 13
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_department_rollup_is_sorted_by_average():
    users = [
        staff("u1", "Sales", attempt("yn")),        # 50
        staff("u2", "Finance", attempt("yy")),      # 100
        staff("u3", "Sales", attempt("yy")),        # 100
        staff("u4", "", attempt("nn")),             # 0
        staff("u5", "Finance", attempt("yn")),      # 50
        staff("u6", "Marketing", attempt("yyyn")),  # 75
    ]

    stats = aggregate_report(users, QUIZ_ID, [])

    assert [(d.name, d.avg, d.count) for d in stats.dept_chart_data] == [
        ("Sales", 75, 2),
        ("Finance", 75, 2),
        ("Marketing", 75, 1),
        ("Unknown", 0, 1),
    ]
    assert stats.top_dept == "Sales"


def test_question_analysis_is_sorted_hardest_first():
    questions = [question(1), question(2), question(3), question(4)]
    users = [
        staff("u1", record=attempt("yyny")),
        staff("u2", record=attempt("ynny")),
        staff("u3", record=attempt("yyyy", total=4)),
    ]

    stats = aggregate_report(users, QUIZ_ID, questions)

    assert [(q.question_id, q.correct_rate) for q in stats.question_analysis_data] == [
        (3, 33), (2, 67), (1, 100), (4, 100)
    ]
    assert all(q.attempts == 3 for q in stats.question_analysis_data)


def test_question_without_attempts_has_zero_rate():
    questions = [question(1), question(2), question(3)]
    users = [staff("u1", record=attempt("yy"))]

    stats = aggregate_report(users, QUIZ_ID, questions)

    unanswered = stats.question_analysis_data[0]
    assert (unanswered.question_id, unanswered.correct_rate, unanswered.attempts) == (3, 0, 0)


def test_export_rows_cover_the_whole_roster():
    users = [
        staff("u1", "Sales", attempt("yn")),
        staff("u2", "Finance", attempt("y", total=2)),
        staff("u3", "Finance"),
    ]

    rows = build_export_rows(users, QUIZ_ID)

    assert rows == [
        {"Employee ID": "EMP-u1", "Name": "User u1", "Department": "Sales",
         "Status": "Completed", "Score": "1/2", "Date": "2026-03-02"},
        {"Employee ID": "EMP-u2", "Name": "User u2", "Department": "Finance",
         "Status": "In Progress", "Score": "1/2", "Date": "2026-03-02"},
        {"Employee ID": "EMP-u3", "Name": "User u3", "Department": "Finance",
         "Status": "Not Started", "Score": "-", "Date": "-"},
    ]


def test_export_row_without_answer_time():
    record = AttemptRecord(score=0, total_questions=3, completed_at=None, answers={})

    rows = build_export_rows([staff("u1", record=record)], QUIZ_ID)

    assert rows[0]["Status"] == "In Progress"
    assert rows[0]["Score"] == "0/3"
    assert rows[0]["Date"] == "-"


def test_rounded_percentage_decides_pass_and_bucket():
    users = [
        staff("u1", record=attempt("y" * 99 + "n" * 101)),   # 49.5 -> 50
        staff("u2", record=attempt("y" * 51 + "n" * 199)),   # 20.4 -> 20
    ]

    stats = aggregate_report(users, QUIZ_ID, [])

    assert [p.percentage for p in stats.all_participants] == [50, 20]
    assert stats.pass_rate == 50
    assert [b.count for b in stats.score_distribution] == [1, 0, 1, 0, 0]
