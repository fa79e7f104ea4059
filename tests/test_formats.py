"""
Unit tests for the format-specific standard reports.
"""

import pytest

from insights.dataset import build_students
from insights.formats import (
    STANDARD_DETAIL,
    STANDARD_SUMMARY,
    UNCATEGORIZED,
    build_format_sections,
    difficulty_bucket,
    index_metadata,
)
from insights.schema import resolve_schema


def _sections(dataset, data_format, metadata=None):
    schema = resolve_schema(dataset.header, dataset.standard_row)
    students = build_students(dataset, schema)
    return build_format_sections(data_format, students, schema.questions, schema.standards, metadata)


class TestDifficultyBucket:

    @pytest.mark.parametrize("label,expected", [
        ("H", "High"), ("medium", "Medium"), ("L", "Low"), ("hard", "High"), ("easy", "Low"),
        ("", "Unknown"), (None, "Unknown"), ("x", "Unknown"),
    ])
    def test_labels(self, label, expected):
        assert difficulty_bucket(label) == expected


class TestStandardDetail:

    METADATA = {
        "item_descriptions": {1: "Adds fractions"},
        "item_difficulties": {1: "H", "2": "easy"},
        "reporting_categories": {"S1": "Number Sense"},
    }

    def test_standard_rollup(self, four_student_dataset):
        report = _sections(four_student_dataset, STANDARD_DETAIL, self.METADATA)
        assert report["format"] == STANDARD_DETAIL
        assert report["standards"][0] == {
            "standard": "S1", "correct": 2, "incorrect": 2, "total": 4, "percentage": 50,
        }

    def test_item_rollup_uses_metadata(self, four_student_dataset):
        q1, q2 = _sections(four_student_dataset, STANDARD_DETAIL, self.METADATA)["items"]
        assert q1["description"] == "Adds fractions"
        assert q1["difficulty_bucket"] == "High"
        assert q2["description"] == ""
        assert q2["difficulty"] == "easy"
        assert q2["difficulty_bucket"] == "Low"

    def test_category_rollup_ends_with_total(self, four_student_dataset):
        categories = _sections(four_student_dataset, STANDARD_DETAIL, self.METADATA)["categories"]
        assert [c["category"] for c in categories] == ["Number Sense", UNCATEGORIZED, "Total"]
        total = categories[-1]
        assert (total["correct"], total["total"], total["percentage"]) == (4, 8, 50)
        assert total["standards"] == ["S1", "S2"]

    def test_missing_metadata(self, four_student_dataset):
        report = _sections(four_student_dataset, STANDARD_DETAIL)
        assert [c["category"] for c in report["categories"]] == [UNCATEGORIZED, "Total"]
        assert all(i["difficulty_bucket"] == "Unknown" for i in report["items"])


class TestStandardSummary:

    def test_student_scores_sorted_by_teacher_then_name(self, two_teacher_dataset):
        report = _sections(two_teacher_dataset, STANDARD_SUMMARY, {"scaled_scores": {"1": 512}})
        rows = report["student_scores"]
        assert [r["name"] for r in rows] == ["Cole", "Dunn", "Ezra", "Able", "Baker"]
        able = rows[3]
        assert (able["correct"], able["total"], able["percentage"], able["scaled_score"]) == (4, 4, 100, 512)
        assert rows[0]["scaled_score"] is None
        assert rows[2]["total"] == 0

    def test_difficulty_breakdown(self, two_teacher_dataset):
        metadata = {"item_difficulties": {1: "H", 2: "H", 3: "L"}}
        breakdown = _sections(two_teacher_dataset, STANDARD_SUMMARY, metadata)["difficulty_breakdown"]
        assert breakdown["buckets"] == ["High", "Low", "Unknown"]
        assert breakdown["totals"]["High"] == {"correct": 3, "total": 8, "percentage": 38}
        assert breakdown["totals"]["Low"]["percentage"] == 75
        assert breakdown["totals"]["Unknown"]["percentage"] == 25
        baker = breakdown["students"][1]
        assert baker["buckets"]["High"] == {"correct": 1, "total": 2}


class TestDispatch:

    def test_metadata_keys_matched_as_text(self, two_teacher_dataset):
        metadata = {"scaled_scores": {1: 480, 2.0: 455}, "item_difficulties": {"1": "H"}}
        report = _sections(two_teacher_dataset, STANDARD_SUMMARY, metadata)
        scaled = {r["name"]: r["scaled_score"] for r in report["student_scores"]}
        assert scaled == {"Able": 480, "Baker": 455, "Cole": None, "Dunn": None, "Ezra": None}
        assert report["difficulty_breakdown"]["buckets"] == ["High", "Unknown"]

    def test_unknown_format_gives_none(self, four_student_dataset):
        assert _sections(four_student_dataset, None) is None
        assert _sections(four_student_dataset, "something_else") is None


class TestIndexMetadata:

    def test_rekeys_each_table_once(self):
        indexed = index_metadata({"scaled_scores": {101: 500, "102": 510}, "item_descriptions": None})
        assert indexed == {"scaled_scores": {"101": 500, "102": 510}, "item_descriptions": {}}

    def test_empty(self):
        assert index_metadata(None) == {}
