"""
Unit tests for the score heatmaps.
"""

from conftest import make_dataset, scored

from insights.dataset import build_students
from insights.heatmap import (
    ALL_TEACHERS_LABEL,
    CLASS_AVERAGE_LABEL,
    build_heatmaps,
    cell_value,
    student_question_heatmap,
    teacher_standard_heatmap,
)
from insights.schema import resolve_schema


def _resolve(dataset):
    schema = resolve_schema(dataset.header, dataset.standard_row)
    return build_students(dataset, schema), schema


class TestStudentQuestionHeatmap:

    def test_rows_follow_students_then_class_average(self, two_teacher_dataset):
        students, schema = _resolve(two_teacher_dataset)
        hm = student_question_heatmap(students, schema.questions)
        assert [q["number"] for q in hm["questions"]] == [1, 2, 3, 4]
        assert [r["name"] for r in hm["rows"]] == ["Able", "Baker", "Cole", "Dunn", "Ezra", CLASS_AVERAGE_LABEL]
        assert hm["rows"][1]["question_scores"] == [1, 0, 1, 0]
        assert hm["rows"][4]["question_scores"] == [None, None, None, None]

    def test_class_average_row(self, two_teacher_dataset):
        students, schema = _resolve(two_teacher_dataset)
        average = student_question_heatmap(students, schema.questions)["rows"][-1]
        assert average["teacher"] == ""
        assert average["score_pct"] == 35
        assert average["question_scores"] == [50, 25, 75, 25]

    def test_unattempted_question_is_none(self):
        students, schema = _resolve(make_dataset(["S1"], [("1", "Ann", "Park", 0, scored(""))]))
        average = student_question_heatmap(students, schema.questions)["rows"][-1]
        assert average["question_scores"] == [None]

    def test_no_students(self):
        students, schema = _resolve(make_dataset(["S1"], []))
        hm = student_question_heatmap(students, schema.questions)
        assert len(hm["rows"]) == 1
        assert hm["rows"][0]["score_pct"] is None


class TestTeacherStandardHeatmap:

    def test_values_per_teacher_and_pooled(self, two_teacher_dataset):
        students, schema = _resolve(two_teacher_dataset)
        hm = teacher_standard_heatmap(students, schema.questions, schema.standards)
        assert hm["standards"] == ["S1", "S2", "S3"]
        assert [r["teacher"] for r in hm["rows"]] == ["Smith", "Jones", ALL_TEACHERS_LABEL]
        assert hm["rows"][0]["values"] == [75, 100, 50]
        assert hm["rows"][1]["values"] == [0, 50, 0]
        assert hm["rows"][2]["values"] == [38, 75, 25]

    def test_cell_value_lookup(self, two_teacher_dataset):
        students, schema = _resolve(two_teacher_dataset)
        hm = build_heatmaps(students, schema.questions, schema.standards)["teacher_standard"]
        assert cell_value(hm, "Jones", "S2") == 50
        assert cell_value(hm, "Nobody", "S2") is None
        assert cell_value(hm, "Jones", "S9") is None

    def test_teacher_with_no_scored_cells(self):
        students, schema = _resolve(make_dataset(["S1"], [
            ("1", "Ann", "Park", 0, scored("")),
            ("2", "Bo", "Quinn", 100, scored(1)),
        ]))
        hm = teacher_standard_heatmap(students, schema.questions, schema.standards)
        assert hm["rows"][0] == {"teacher": "Park", "values": [None]}
        assert hm["rows"][1] == {"teacher": "Quinn", "values": [100]}
