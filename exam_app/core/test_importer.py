"""Utilities for importing objective tests from a human-friendly text file.

File format: one header block, then question blocks, separated by blank lines
or '---':

    TITLE: Capitals of Europe
    SUBJECT: Geography
    CLASS: 8
    DURATION: 10        (whole minutes)
    DESCRIPTION: Optional one-line description

    Q: What is the capital of France? (supports markdown + LaTeX)
    A: Berlin
    B: Madrid
    C: Paris
    D: Rome
    CORRECT: C

Every question must name its CORRECT option because objective tests are scored automatically.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from exam_app.constants.session_constants import DEFAULT_DURATION_MINUTES, OPTION_LABELS
from exam_app.core.errors import TestImportError
from exam_app.core.models import Question, Test

logger = logging.getLogger(__name__)

_HEADER_KEYS = ("TITLE", "SUBJECT", "CLASS", "DURATION", "DESCRIPTION")


@dataclass(slots=True)
class ImportedTest:
    """Container for an imported test and its ordered questions."""

    source_path: Path | None
    test: Test
    questions: list[Question]


def load_test_from_file(file_path: Path, test_id: str | None = None) -> ImportedTest:
    text = file_path.read_text(encoding="utf-8")
    imported = parse_test_text(text, test_id or file_path.stem)
    imported.source_path = file_path
    return imported


def load_test_directory(directory: Path) -> list[ImportedTest]:
    """Import every ``*.txt`` test definition in ``directory``, sorted by name."""
    imported: list[ImportedTest] = []
    for path in sorted(directory.glob("*.txt")):
        imported.append(load_test_from_file(path))
    logger.info("Imported %d test definitions from %s", len(imported), directory)
    return imported


def parse_test_text(text: str, test_id: str) -> ImportedTest:
    blocks = _split_blocks(text)
    if not blocks:
        raise TestImportError("Test file is empty.")

    test = _parse_header(blocks[0], test_id)
    questions = [
        _parse_question(block, test_id, position)
        for position, block in enumerate(blocks[1:], start=1)
    ]
    if not questions:
        raise TestImportError("Test file did not contain any questions.")
    return ImportedTest(source_path=None, test=test, questions=questions)


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---" or not stripped:
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        current_block.append(raw_line)
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return blocks


def _parse_header(block: str, test_id: str) -> Test:
    values: dict[str, str] = {}
    for raw_line in block.splitlines():
        line = raw_line.strip()
        key, sep, value = line.partition(":")
        key = key.strip().upper()
        if not sep or key not in _HEADER_KEYS:
            raise TestImportError(f"Expected a header field (TITLE, SUBJECT, ...), got '{line}'.")
        values[key] = value.strip()

    title = values.get("TITLE", "")
    if not title:
        raise TestImportError("TITLE is required.")
    class_name = values.get("CLASS", "")
    if not class_name:
        raise TestImportError("CLASS is required.")

    duration = DEFAULT_DURATION_MINUTES
    if "DURATION" in values:
        try:
            duration = int(values["DURATION"])
        except ValueError as exc:
            raise TestImportError("DURATION must be a whole number of minutes.") from exc
        if duration <= 0:
            raise TestImportError("DURATION must be a positive integer.")

    return Test(
        id=test_id,
        class_name=class_name,
        subject=values.get("SUBJECT", ""),
        title=title,
        description=values.get("DESCRIPTION", ""),
        duration_minutes=duration,
    )


def _parse_question(block: str, test_id: str, position: int) -> Question:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in OPTION_LABELS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in OPTION_LABELS:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise TestImportError(
                f"Question {position}: text outside of a known section: '{line}'."
            )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise TestImportError(f"Question {position}: text missing (Q: ...)")
    if len(options) != len(OPTION_LABELS):
        raise TestImportError(f"Question {position}: define exactly four options (A-D).")
    option_texts = tuple(options[letter].strip() for letter in OPTION_LABELS)
    if any(not option for option in option_texts):
        raise TestImportError(f"Question {position}: option text cannot be empty.")
    if correct_letter is None:
        raise TestImportError(f"Question {position}: CORRECT is required.")
    if correct_letter not in OPTION_LABELS:
        raise TestImportError(f"Question {position}: CORRECT must be one of A, B, C, or D.")

    return Question(
        id=f"{test_id}-q{position}",
        test_id=test_id,
        question_text=question_text,
        options=option_texts,
        correct_option=correct_letter,
    )
