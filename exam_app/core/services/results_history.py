"""Per-student objective results, newest first."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable

from exam_app.constants.session_constants import UNKNOWN_PLACEHOLDER
from exam_app.core.models import AttemptRecord, ResultRow, Test

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def user_results(
    attempts: Iterable[AttemptRecord],
    user_id: str,
    lookup_test: Callable[[str], Test | None],
) -> list[ResultRow]:
    rows = [
        _to_row(record, lookup_test(record.test_id))
        for record in attempts
        if record.user_id == user_id
    ]
    rows.sort(key=_submitted_sort_key, reverse=True)
    return rows


def _to_row(record: AttemptRecord, test: Test | None) -> ResultRow:
    return ResultRow(
        test_id=record.test_id,
        test_title=test.title if test else UNKNOWN_PLACEHOLDER,
        subject=test.subject if test else UNKNOWN_PLACEHOLDER,
        score=record.score,
        total_questions=record.total_questions,
        submitted_at=record.submitted_at,
        elapsed_seconds=record.elapsed_seconds(),
    )


def _submitted_sort_key(row: ResultRow) -> datetime:
    if row.submitted_at is None:
        return _OLDEST
    if row.submitted_at.tzinfo is None:
        return row.submitted_at.replace(tzinfo=timezone.utc)
    return row.submitted_at
