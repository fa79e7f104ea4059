"""
Unit tests for teacher and district standard summaries.
"""

import pytest

from conftest import make_dataset, scored

from insights.dataset import build_students, by_teacher
from insights.schema import resolve_schema
from insights.settings import Settings
from insights.summary import (
    GROWTH,
    MONITOR,
    STRENGTH,
    bucket_standards,
    categorize,
    summarize_district,
    summarize_teachers,
)


def _summaries(dataset, settings=None):
    settings = settings or Settings()
    schema = resolve_schema(dataset.header, dataset.standard_row)
    students = build_students(dataset, schema)
    teachers = summarize_teachers(by_teacher(students), schema.questions, schema.standards, settings)
    return teachers, students, schema


class TestCategorize:

    @pytest.mark.parametrize("pct,expected", [
        (0, GROWTH), (49, GROWTH), (50, MONITOR), (74, MONITOR), (75, STRENGTH), (100, STRENGTH),
    ])
    def test_default_thresholds(self, pct, expected):
        assert categorize(pct, Settings()) == expected


class TestTeacherSummary:

    def test_four_student_average(self, four_student_dataset):
        (smith,), _, _ = _summaries(four_student_dataset)
        assert smith["teacher"] == "Smith"
        assert smith["student_count"] == 4
        assert smith["average"] == 50
        assert smith["total_correct"] == 4
        assert smith["total_answered"] == 8

    def test_standard_rows_and_buckets(self, two_teacher_dataset):
        (smith, jones), _, _ = _summaries(two_teacher_dataset)
        s1, s2, s3 = smith["standards"]
        assert (s1["standard"], s1["correct"], s1["total"], s1["percentage"]) == ("S1", 3, 4, 75)
        assert s2["percentage"] == 100
        assert s3["percentage"] == 50
        assert smith[STRENGTH] == ["S1", "S2"]
        assert smith[MONITOR] == ["S3"]
        assert smith[GROWTH] == []
        assert smith["worst_sol"] == "S3 (50%)"
        assert smith["best_sol"] == "S2 (100%)"
        assert smith["average"] == 75

    def test_student_color_counts(self, two_teacher_dataset):
        (smith, _), _, _ = _summaries(two_teacher_dataset)
        s1, _, s3 = smith["standards"]
        assert (s1["red_count"], s1["yellow_count"], s1["green_count"]) == (0, 1, 1)
        assert (s3["red_count"], s3["yellow_count"], s3["green_count"]) == (1, 0, 1)

    def test_unscored_students_do_not_count(self, two_teacher_dataset):
        _, jones = _summaries(two_teacher_dataset)[0]
        assert jones["student_count"] == 2
        # 1 of 8 answered correctly, half rounded up
        assert jones["average"] == 13

    def test_teacher_without_qualifying_students(self):
        ds = make_dataset(["S1"], [("1", "Ann", "Park", 0, scored(""))])
        (park,), _, _ = _summaries(ds)
        assert park["student_count"] == 0
        assert park["average"] == 0
        assert park["standards"][0]["category"] is None
        assert park["worst_sol"] == "-"
        assert park["best_sol"] == "-"

    def test_custom_thresholds(self, four_student_dataset):
        (smith,), _, _ = _summaries(four_student_dataset, Settings(growth_threshold=60, strength_threshold=90))
        assert smith[GROWTH] == ["S1", "S2"]


class TestBucketStandards:

    def test_skips_unattempted_standards(self):
        rows = [
            {"standard": "A", "total": 0, "percentage": 0, "category": None},
            {"standard": "B", "total": 4, "percentage": 25, "category": GROWTH},
        ]
        buckets = bucket_standards(rows)
        assert buckets[GROWTH] == ["B"]
        assert buckets["worst_sol"] == buckets["best_sol"] == "B (25%)"


class TestDistrictSummary:

    def test_overall_average_is_mean_of_teacher_averages(self, two_teacher_dataset):
        teachers, students, schema = _summaries(two_teacher_dataset)
        district = summarize_district(teachers, students, schema.questions, schema.standards, Settings())
        assert [t["teacher"] for t in district["teachers"]] == ["Smith", "Jones"]
        assert district["teacher_count"] == 2
        assert district["overall_average"] == 44
        assert district["student_count"] == 4
        assert district["pooled_average"] == 44
        assert [r["percentage"] for r in district["standards"]] == [38, 75, 25]

    def test_zero_student_teachers_are_excluded(self):
        ds = make_dataset(["S1"], [
            ("1", "Ann", "Park", 0, scored("")),
            ("2", "Bo", "Quinn", 100, scored(1)),
            ("3", "Cy", "Reed", 0, scored(0)),
        ])
        teachers, students, schema = _summaries(ds)
        district = summarize_district(teachers, students, schema.questions, schema.standards, Settings())
        assert [t["teacher"] for t in district["teachers"]] == ["Quinn", "Reed"]
        assert district["overall_average"] == 50

    def test_ties_keep_first_seen_order(self):
        ds = make_dataset(["S1"], [
            ("1", "Ann", "Park", 100, scored(1)),
            ("2", "Bo", "Quinn", 100, scored(1)),
        ])
        teachers, students, schema = _summaries(ds)
        district = summarize_district(teachers, students, schema.questions, schema.standards, Settings())
        assert [t["teacher"] for t in district["teachers"]] == ["Park", "Quinn"]

    def test_empty_district(self):
        district = summarize_district([], [], [], [], Settings())
        assert district["teachers"] == []
        assert district["overall_average"] == 0
