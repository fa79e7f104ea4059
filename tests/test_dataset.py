"""
Unit tests for dataset validation and student normalization.
"""

import pytest

from insights.dataset import UNASSIGNED_TEACHER, UNKNOWN_PERIOD, Dataset, build_students, by_teacher
from insights.errors import DatasetError
from insights.parser import Score
from insights.schema import resolve_schema


def _students(dataset):
    return build_students(dataset, resolve_schema(dataset.header, dataset.standard_row))


class TestDatasetFromRows:

    def test_short_rows_are_padded(self):
        ds = Dataset.from_rows(["Percentage", "a", "s"], ["", "S1", "S1"], [["50", "A"]])
        assert ds.rows == (("50", "A", ""),)

    def test_long_row_raises(self):
        with pytest.raises(DatasetError):
            Dataset.from_rows(["Percentage"], [""], [["1", "2"]])

    def test_standard_row_width_mismatch_raises(self):
        with pytest.raises(DatasetError):
            Dataset.from_rows(["Percentage", "a", "s"], ["", "S1"], [])


class TestBuildStudents:

    def test_normalizes_scores_once(self):
        ds = Dataset.from_rows(
            ["Student ID", "Teacher", "Percentage", "a", "s", "a", "s", "a", "s"],
            ["", "", "", "S1", "S1", "S1", "S1", "S2", "S2"],
            [["7", "Lee", "67%", "A", 1, "B", "0", "", ""]],
        )
        (student,) = _students(ds)
        assert student.scores == (Score.CORRECT, Score.INCORRECT, Score.UNSCORED)
        assert student.answers == ("A", "B", "")
        assert student.percentage == 67.0
        assert student.tally(resolve_schema(ds.header, ds.standard_row).questions) == {"S1": [1, 2]}

    def test_name_from_last_and_first(self):
        ds = Dataset.from_rows(
            ["Last Name", "First Name", "Percentage", "a", "s"],
            ["", "", "", "S1", "S1"],
            [["Diaz", "Rosa", "100", "A", "1"]],
        )
        (student,) = _students(ds)
        assert student.name == "Diaz, Rosa"
        assert student.student_id == "Diaz, Rosa"
        assert student.teacher == UNASSIGNED_TEACHER

    def test_period_assignment_takes_precedence_over_column(self):
        ds = Dataset.from_rows(
            ["Student ID", "Period", "Percentage", "a", "s"],
            ["", "", "", "S1", "S1"],
            [["1", "4", "0", "A", "0"], ["2", "5", "0", "A", "0"], ["3", "", "0", "A", "0"]],
            period_assignment={"1": "2", "2": "Unknown"},
        )
        assert [s.period for s in _students(ds)] == ["2", "5", UNKNOWN_PERIOD]

    def test_by_teacher_keeps_first_seen_order(self, two_teacher_dataset):
        assert list(by_teacher(_students(two_teacher_dataset))) == ["Smith", "Jones"]
