"""
Shared fixtures: small in-memory benchmark exports.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from insights.dataset import Dataset

BASE_HEADER = ["Student ID", "Student Name", "Teacher", "Percentage"]


def make_dataset(
    standards: Sequence[str],
    students: Sequence[Tuple[str, str, str, float, Sequence[Tuple[str, object]]]],
    periods: Optional[Dict[str, str]] = None,
    assessment_id: str = "test",
) -> Dataset:
    """
    students: (id, name, teacher, percentage, [(answer, score), ...])
    """
    header = list(BASE_HEADER)
    standard_row = ["", "", "", ""]
    for n, code in enumerate(standards, 1):
        header += [f"Q{n} Answer", f"Q{n} Score"]
        standard_row += [code, code]
    rows = []
    for sid, name, teacher, pct, cells in students:
        row: List[object] = [sid, name, teacher, pct]
        for answer, score in cells:
            row += [answer, score]
        rows.append(row)
    return Dataset.from_rows(header, standard_row, rows, periods, assessment_id)


def scored(*scores) -> List[Tuple[str, object]]:
    """Cells from scores alone; correct answers are 'A', wrong ones 'B'."""
    return [("A" if s in (1, "1") else "B" if s in (0, "0") else "", s) for s in scores]


@pytest.fixture
def four_student_dataset() -> Dataset:
    return make_dataset(
        ["S1", "S2"],
        [
            ("1", "Able", "Smith", 100, scored(1, 1)),
            ("2", "Baker", "Smith", 50, scored(1, 0)),
            ("3", "Cole", "Smith", 50, scored(0, 1)),
            ("4", "Dunn", "Smith", 0, scored(0, 0)),
        ],
    )


@pytest.fixture
def two_teacher_dataset() -> Dataset:
    return make_dataset(
        ["S1", "S1", "S2", "S3"],
        [
            ("1", "Able", "Smith", 100, scored(1, 1, 1, 1)),
            ("2", "Baker", "Smith", 50, scored(1, 0, 1, 0)),
            ("3", "Cole", "Jones", 25, scored(0, 0, 1, 0)),
            ("4", "Dunn", "Jones", 0, scored(0, 0, 0, 0)),
            ("5", "Ezra", "Jones", 0, scored("", "", "", "")),
        ],
        periods={"1": "1", "2": "1", "3": "2", "4": "2"},
    )
