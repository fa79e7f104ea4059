"""
Merge student profiles across several assessments before grouping.

Counts are summed per standard. Identity fields follow the most recent
dataset, except that an "Unknown" period never replaces a known one.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from insights.dataset import UNKNOWN_PERIOD, Dataset, build_students
from insights.grouping import StudentProfile, build_profiles, form_groups
from insights.schema import resolve_schema
from insights.settings import Settings

logger = logging.getLogger(__name__)


def merge_profiles(profile_lists: Iterable[Sequence[StudentProfile]]) -> List[StudentProfile]:
    """Combine profiles keyed by student id; datasets are given oldest first."""
    merged: Dict[str, StudentProfile] = {}
    for profiles in profile_lists:
        for p in profiles:
            current = merged.get(p.student_id)
            if current is None:
                merged[p.student_id] = StudentProfile(
                    student_id=p.student_id,
                    name=p.name,
                    teacher=p.teacher,
                    period=p.period,
                    per_standard={code: list(counts) for code, counts in p.per_standard.items()},
                )
                continue
            current.name = p.name
            current.teacher = p.teacher
            if p.period != UNKNOWN_PERIOD:
                current.period = p.period
            for code, (correct, total) in p.per_standard.items():
                counts = current.per_standard.setdefault(code, [0, 0])
                counts[0] += correct
                counts[1] += total
    return list(merged.values())


def form_groups_from_datasets(datasets: Sequence[Dataset], settings: Settings) -> List[Dict]:
    """Remediation groups over the merged weak-standard profiles of every dataset."""
    profile_lists = []
    standard_order: List[str] = []
    for dataset in datasets:
        schema = resolve_schema(dataset.header, dataset.standard_row)
        students = build_students(dataset, schema)
        profile_lists.append(build_profiles(students, schema.questions))
        for code in schema.standards:
            if code not in standard_order:
                standard_order.append(code)

    profiles = merge_profiles(profile_lists)
    logger.info(f"Merged {sum(len(p) for p in profile_lists)} profiles from {len(datasets)} datasets "
                f"into {len(profiles)} students")
    return form_groups(profiles, standard_order, settings)
