"""
Header resolution for wide-format benchmark exports.

Layout of an export:

    Student ID | Student Name | Teacher | Percentage | Q1 Ans | Q1 Score | Q2 Ans | Q2 Score ...
    (standard row)                                    | 4.2a   | 4.2a     | 4.3    | 4.3

Everything after the percentage column is an alternating answer/score
sequence. `resolve_schema` turns that implicit position coupling into a typed
`AssessmentSchema`, or raises `ConfigurationError` naming the failed step.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from insights.errors import ConfigurationError
from insights.parser import CellParser

logger = logging.getLogger(__name__)

PERCENTAGE_COLUMNS = ("percentage", "percent", "score_percent")
TEACHER_COLUMNS = ("teacher", "teacher_name", "instructor")
NAME_COLUMNS = ("student_name", "name")
ID_COLUMNS = ("student_id", "id", "student_number")
PERIOD_COLUMNS = ("period", "class_period")


@dataclass(frozen=True)
class Question:
    number: int
    standard: str
    answer_index: int
    score_index: int


@dataclass(frozen=True)
class AssessmentSchema:
    questions: Tuple[Question, ...]
    percentage_index: int
    teacher_index: Optional[int] = None
    name_index: Optional[int] = None
    last_name_index: Optional[int] = None
    first_name_index: Optional[int] = None
    id_index: Optional[int] = None
    period_index: Optional[int] = None
    standards: Tuple[str, ...] = field(default=())


def resolve_column(header: Sequence[str], name: str) -> Optional[int]:
    """
    Find `name` in `header`, case-insensitively.

    Tries an exact match first, then the target with underscores turned into
    spaces (and spaces into underscores). Header cells are never rewritten.
    """
    cells = [str(h).strip().lower() for h in header]
    target = name.strip().lower()
    candidates = [target]
    for variant in (target.replace("_", " "), target.replace(" ", "_")):
        if variant not in candidates:
            candidates.append(variant)
    for candidate in candidates:
        for i, cell in enumerate(cells):
            if cell == candidate:
                return i
    return None


def _first_column(header: Sequence[str], names: Sequence[str]) -> Optional[int]:
    for name in names:
        idx = resolve_column(header, name)
        if idx is not None:
            return idx
    return None


def find_percentage_column(header: Sequence[str]) -> int:
    idx = _first_column(header, PERCENTAGE_COLUMNS)
    if idx is None:
        raise ConfigurationError(
            "percentage column",
            f"none of {list(PERCENTAGE_COLUMNS)} found in header {list(header)}",
        )
    return idx


def derive_questions(header: Sequence[str], standard_row: Sequence[str]) -> List[Question]:
    """Build one Question per answer/score pair following the percentage column."""
    pct_idx = find_percentage_column(header)
    questions = []
    col = pct_idx + 1
    while col + 1 < len(header):
        number = len(questions) + 1
        standard = CellParser.text(standard_row[col]) if col < len(standard_row) else ""
        if not standard and col + 1 < len(standard_row):
            standard = CellParser.text(standard_row[col + 1])
        questions.append(Question(
            number=number,
            standard=standard or f"Q{number}",
            answer_index=col,
            score_index=col + 1,
        ))
        col += 2
    if col < len(header):
        logger.debug(f"Dropping trailing unpaired column {header[col]!r}")
    return questions


def resolve_schema(header: Sequence[str], standard_row: Sequence[str]) -> AssessmentSchema:
    questions = derive_questions(header, standard_row)
    if not questions:
        logger.warning("No answer/score columns follow the percentage column")

    standards: List[str] = []
    for q in questions:
        if q.standard not in standards:
            standards.append(q.standard)

    schema = AssessmentSchema(
        questions=tuple(questions),
        percentage_index=find_percentage_column(header),
        teacher_index=_first_column(header, TEACHER_COLUMNS),
        name_index=_first_column(header, NAME_COLUMNS),
        last_name_index=resolve_column(header, "last_name"),
        first_name_index=resolve_column(header, "first_name"),
        id_index=_first_column(header, ID_COLUMNS),
        period_index=_first_column(header, PERIOD_COLUMNS),
        standards=tuple(standards),
    )
    logger.info(f"Resolved schema: {len(questions)} questions, {len(standards)} standards")
    return schema
