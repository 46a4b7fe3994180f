from __future__ import annotations

from datetime import timedelta

from exam_app.core.services.results_history import user_results

from conftest import START, make_attempt, make_test


def test_results_are_filtered_to_user_and_newest_first():
    tests = {"gk": make_test("gk")}
    attempts = [
        make_attempt("student-1", 30, 2, started=START),
        make_attempt("student-2", 30, 5, started=START),
        make_attempt("student-1", 45, 4, started=START + timedelta(days=1)),
        make_attempt("student-1", None, 1, started=START + timedelta(days=2)),
    ]

    rows = user_results(attempts, "student-1", tests.get)

    assert [row.score for row in rows] == [4, 2, 1]
    assert rows[0].elapsed_seconds == 45
    assert rows[0].test_title == "Test gk"
    assert rows[-1].submitted_at is None


def test_unknown_tests_use_placeholder():
    rows = user_results([make_attempt("student-1", 10, 1, test_id="gone")], "student-1", lambda _id: None)

    assert rows[0].test_title == "Unknown"
    assert rows[0].subject == "Unknown"
