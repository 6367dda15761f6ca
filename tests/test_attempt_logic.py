from datetime import datetime

from staffquiz.router.api.logics.attempt_logic import record_answer
from staffquiz.schema.attempt_schema import AnswerRecord, AttemptRecord

NOW = datetime(2026, 3, 2, 9, 30)
LATER = datetime(2026, 3, 2, 9, 45)


def test_first_answer_starts_an_attempt():
    attempt = record_answer(None, "q1", "A", "A", 3, now=NOW)

    assert attempt.score == 1
    assert attempt.total_questions == 3
    assert attempt.completed_at == NOW
    assert attempt.answers == {"q1": AnswerRecord(selected_answer="A", is_correct=True)}
    assert not attempt.is_completed


def test_score_always_matches_the_answers():
    picks = [("q1", "A", "A"), ("q2", "C", "B"), ("q3", "D", "D"), ("q2", "B", "B"), ("q1", "B", "A")]
    attempt = None
    for question_id, selected, correct in picks:
        attempt = record_answer(attempt, question_id, selected, correct, 3, now=NOW)
        assert attempt.score == sum(1 for a in attempt.answers.values() if a.is_correct)

    assert attempt.score == 2
    assert attempt.is_completed


def test_repeated_identical_answer_is_idempotent():
    first = record_answer(None, "q1", "B", "A", 2, now=NOW)
    second = record_answer(first, "q1", "B", "A", 2, now=NOW)

    assert second == first
    assert second.model_dump() == first.model_dump()


def test_changing_an_answer_only_touches_that_question():
    prior = AttemptRecord(
        score=2,
        total_questions=2,
        completed_at=NOW,
        answers={
            "q1": AnswerRecord(selected_answer="A", is_correct=True),
            "q2": AnswerRecord(selected_answer="B", is_correct=True),
        },
    )

    attempt = record_answer(prior, "q1", "B", "A", 2, now=LATER)

    assert attempt.answers["q1"] == AnswerRecord(selected_answer="B", is_correct=False)
    assert attempt.answers["q2"] == prior.answers["q2"]
    assert attempt.score == 1
    assert attempt.completed_at == LATER


def test_single_question_overwrite_drops_score_to_zero():
    prior = AttemptRecord(
        score=1, total_questions=1, answers={"q1": AnswerRecord(selected_answer="A", is_correct=True)}
    )

    attempt = record_answer(prior, "q1", "B", "A", 1, now=NOW)

    assert attempt.answers == {"q1": AnswerRecord(selected_answer="B", is_correct=False)}
    assert attempt.score == 0


def test_prior_attempt_is_not_mutated():
    prior = record_answer(None, "q1", "A", "A", 2, now=NOW)
    snapshot = prior.model_dump()

    record_answer(prior, "q2", "C", "D", 2, now=LATER)
    record_answer(prior, "q1", "D", "A", 2, now=LATER)

    assert prior.model_dump() == snapshot


def test_unknown_option_letter_scores_as_wrong():
    attempt = record_answer(None, "q1", "Z", "A", 1, now=NOW)

    assert attempt.answers["q1"].is_correct is False
    assert attempt.score == 0


def test_total_follows_the_live_question_count():
    attempt = record_answer(None, "q1", "A", "A", 2, now=NOW)
    attempt = record_answer(attempt, "q2", "A", "A", 2, now=NOW)
    assert attempt.is_completed

    # a question was added to the quiz before the user changed an answer
    attempt = record_answer(attempt, "q2", "B", "A", 3, now=LATER)

    assert attempt.total_questions == 3
    assert not attempt.is_completed


def test_integer_question_ids_are_stored_as_strings():
    attempt = record_answer(None, 7, "C", "C", 1, now=NOW)

    assert list(attempt.answers) == ["7"]


def test_completed_at_defaults_to_current_time():
    before = datetime.now()
    attempt = record_answer(None, "q1", "A", "A", 1)
    after = datetime.now()

    assert before <= attempt.completed_at <= after
