"""
Dataset model and load-time normalization of student rows.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from insights.errors import DatasetError
from insights.parser import CellParser, Score
from insights.schema import AssessmentSchema, Question

logger = logging.getLogger(__name__)

UNKNOWN_PERIOD = "Unknown"
UNASSIGNED_TEACHER = "Unassigned"


@dataclass(frozen=True)
class Dataset:
    """
    One resolved assessment export.

    `rows` are raw cells aligned to `header`; `standard_row` is the
    curriculum-standard code row, also aligned to `header`.
    """

    header: Tuple[str, ...]
    standard_row: Tuple[str, ...]
    rows: Tuple[Tuple[Any, ...], ...]
    period_assignment: Dict[str, str] = field(default_factory=dict)
    assessment_id: str = ""

    @classmethod
    def from_rows(
        cls,
        header: Sequence[Any],
        standard_row: Sequence[Any],
        rows: Iterable[Sequence[Any]],
        period_assignment: Optional[Dict[str, str]] = None,
        assessment_id: str = "",
    ) -> "Dataset":
        header_t = tuple(CellParser.text(h) for h in header)
        standard_t = tuple(CellParser.text(s) for s in standard_row)
        width = len(header_t)
        if len(standard_t) != width:
            raise DatasetError(
                f"standard row has {len(standard_t)} cells, header has {width}"
            )
        normalized = []
        for i, row in enumerate(rows):
            row = tuple(row)
            if len(row) > width:
                raise DatasetError(f"row {i + 1} has {len(row)} cells, header has {width}")
            if len(row) < width:
                # spreadsheet exports drop trailing empty cells
                row = row + ("",) * (width - len(row))
            normalized.append(row)
        periods = {CellParser.text(k): CellParser.text(v) for k, v in (period_assignment or {}).items()}
        return cls(
            header=header_t,
            standard_row=standard_t,
            rows=tuple(normalized),
            period_assignment=periods,
            assessment_id=assessment_id,
        )


@dataclass(frozen=True)
class StudentRecord:
    row_index: int
    student_id: str
    name: str
    teacher: str
    period: str
    percentage: float
    answers: Tuple[str, ...]
    scores: Tuple[Score, ...]

    @property
    def has_scored(self) -> bool:
        return any(s.is_scored for s in self.scores)

    def tally(self, questions: Sequence[Question]) -> Dict[str, List[int]]:
        """Per-standard [correct, total] over this student's scored questions."""
        counts: Dict[str, List[int]] = {}
        for q, score in zip(questions, self.scores):
            if not score.is_scored:
                continue
            bucket = counts.setdefault(q.standard, [0, 0])
            bucket[1] += 1
            if score is Score.CORRECT:
                bucket[0] += 1
        return counts


def _cell(row: Sequence[Any], idx: Optional[int]) -> str:
    if idx is None:
        return ""
    return CellParser.text(row[idx])


def _student_name(row: Sequence[Any], schema: AssessmentSchema, row_number: int) -> str:
    name = _cell(row, schema.name_index)
    if name:
        return name
    last = _cell(row, schema.last_name_index)
    first = _cell(row, schema.first_name_index)
    if last and first:
        return f"{last}, {first}"
    return last or first or f"Student {row_number}"


def build_students(dataset: Dataset, schema: AssessmentSchema) -> List[StudentRecord]:
    """Normalize every row once into a StudentRecord, in original row order."""
    students = []
    for i, row in enumerate(dataset.rows):
        name = _student_name(row, schema, i + 1)
        student_id = _cell(row, schema.id_index) or name

        period = dataset.period_assignment.get(student_id, "")
        if not period or period == UNKNOWN_PERIOD:
            period = _cell(row, schema.period_index) or UNKNOWN_PERIOD

        students.append(StudentRecord(
            row_index=i,
            student_id=student_id,
            name=name,
            teacher=_cell(row, schema.teacher_index) or UNASSIGNED_TEACHER,
            period=period,
            percentage=CellParser.percentage(row[schema.percentage_index]),
            answers=tuple(CellParser.text(row[q.answer_index]) for q in schema.questions),
            scores=tuple(CellParser.score(row[q.score_index]) for q in schema.questions),
        ))
    logger.debug(f"Normalized {len(students)} student rows")
    return students


def by_teacher(students: Iterable[StudentRecord]) -> Dict[str, List[StudentRecord]]:
    grouped: Dict[str, List[StudentRecord]] = {}
    for s in students:
        grouped.setdefault(s.teacher, []).append(s)
    return grouped
