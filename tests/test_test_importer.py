from __future__ import annotations

from pathlib import Path

import pytest

from exam_app.core.errors import TestImportError
from exam_app.core.test_importer import load_test_directory, load_test_from_file, parse_test_text

SAMPLE_DIR = Path(__file__).resolve().parent.parent / "sample_tests"

VALID_TEST = """\
TITLE: Capitals of Europe
SUBJECT: Geography
CLASS: 8
DURATION: 4
DESCRIPTION: Four **quick** questions

Q: What is the capital of France?
A: Berlin
B: Madrid
C: Paris
D: Rome
CORRECT: c

---
Q: Which city is the capital of
Norway?
A: Oslo
B: Bergen
C: Stockholm
D: Helsinki
CORRECT: A
"""


def test_parse_valid_test():
    imported = parse_test_text(VALID_TEST, "capitals")

    test = imported.test
    assert test.id == "capitals"
    assert test.title == "Capitals of Europe"
    assert test.subject == "Geography"
    assert test.class_name == "8"
    assert test.duration_minutes == 4
    assert test.description == "Four **quick** questions"

    first, second = imported.questions
    assert first.id == "capitals-q1"
    assert first.correct_option == "C"
    assert first.options == ("Berlin", "Madrid", "Paris", "Rome")
    assert second.question_text == "Which city is the capital of\nNorway?"
    assert second.test_id == "capitals"


def test_duration_defaults_to_ten_minutes():
    text = VALID_TEST.replace("DURATION: 4\n", "")

    assert parse_test_text(text, "capitals").test.duration_minutes == 10


@pytest.mark.parametrize(
    "old, new",
    [
        ("DURATION: 4", "DURATION: 0"),
        ("DURATION: 4", "DURATION: four"),
        ("CLASS: 8\n", ""),
        ("TITLE: Capitals of Europe\n", ""),
        ("CORRECT: c\n", ""),
        ("CORRECT: c", "CORRECT: E"),
        ("D: Rome\n", ""),
        ("SUBJECT: Geography", "TOPIC: Geography"),
    ],
)
def test_invalid_definitions_are_rejected(old, new):
    with pytest.raises(TestImportError):
        parse_test_text(VALID_TEST.replace(old, new), "capitals")


def test_header_only_file_is_rejected():
    with pytest.raises(TestImportError):
        parse_test_text("TITLE: Empty\nCLASS: 8\n", "empty")
    with pytest.raises(TestImportError):
        parse_test_text("\n\n", "empty")


def test_load_from_file_uses_stem_as_id(tmp_path):
    path = tmp_path / "capitals.txt"
    path.write_text(VALID_TEST, encoding="utf-8")

    imported = load_test_from_file(path)

    assert imported.test.id == "capitals"
    assert imported.source_path == path


def test_bundled_sample_tests_import():
    imported = load_test_directory(SAMPLE_DIR)

    ids = [item.test.id for item in imported]
    assert ids == sorted(ids)
    assert "fractions" in ids
    fractions = next(item for item in imported if item.test.id == "fractions")
    assert fractions.test.duration_minutes == 3
    assert [q.correct_option for q in fractions.questions] == ["A", "C", "B"]
