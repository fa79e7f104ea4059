"""
Unit tests for multi-assessment profile merging.
"""

from conftest import make_dataset, scored

from insights.grouping import StudentProfile
from insights.merger import form_groups_from_datasets, merge_profiles
from insights.settings import Settings


class TestMergeProfiles:

    def test_counts_are_summed(self):
        merged = merge_profiles([
            [StudentProfile("1", "Ann", "Park", "1", {"S1": [1, 2]})],
            [StudentProfile("1", "Ann", "Park", "1", {"S1": [2, 2], "S2": [0, 1]})],
        ])
        assert len(merged) == 1
        assert merged[0].per_standard == {"S1": [3, 4], "S2": [0, 1]}

    def test_inputs_are_not_mutated(self):
        first = StudentProfile("1", "Ann", "Park", "1", {"S1": [1, 2]})
        merge_profiles([[first], [StudentProfile("1", "Ann", "Park", "1", {"S1": [1, 1]})]])
        assert first.per_standard == {"S1": [1, 2]}

    def test_later_identity_wins(self):
        (merged,) = merge_profiles([
            [StudentProfile("1", "Ann", "Park", "1")],
            [StudentProfile("1", "Ann Lee", "Quinn", "2")],
        ])
        assert (merged.name, merged.teacher, merged.period) == ("Ann Lee", "Quinn", "2")

    def test_unknown_period_never_replaces_known(self):
        (merged,) = merge_profiles([
            [StudentProfile("1", "Ann", "Park", "3")],
            [StudentProfile("1", "Ann", "Park", "Unknown")],
        ])
        assert merged.period == "3"

    def test_order_of_first_appearance(self):
        merged = merge_profiles([
            [StudentProfile("2", "Bo", "Park", "1")],
            [StudentProfile("1", "Ann", "Park", "1"), StudentProfile("2", "Bo", "Park", "1")],
        ])
        assert [p.student_id for p in merged] == ["2", "1"]


class TestFormGroupsFromDatasets:

    def test_weakness_judged_on_merged_counts(self):
        # 1/2 then 2/2 on S1 merges to 3/4 = 75%, above the weakness threshold
        fall = make_dataset(["S1", "S1"], [
            ("1", "Ann", "Park", 50, scored(1, 0)),
            ("2", "Bo", "Park", 0, scored(0, 0)),
        ], periods={"1": "1", "2": "1"})
        spring = make_dataset(["S1", "S1"], [
            ("1", "Ann", "Park", 100, scored(1, 1)),
            ("2", "Bo", "Park", 0, scored(0, 0)),
        ])
        groups = form_groups_from_datasets([fall, spring], Settings())
        assert len(groups) == 1
        assert groups[0]["student_names"] == ["Bo"]
        assert groups[0]["period"] == "1"

    def test_standards_from_every_dataset(self):
        fall = make_dataset(["S1"], [("1", "Ann", "Park", 0, scored(0))])
        spring = make_dataset(["S2"], [("1", "Ann", "Park", 0, scored(0))])
        (group,) = form_groups_from_datasets([fall, spring], Settings())
        assert group["shared_weak_standards"] == ["S1", "S2"]
