"""
Cross-assessment comparison (e.g. fall benchmark vs. spring benchmark).

Both datasets are resolved independently and reduced to students with at
least one scored question. Teacher/standard cells missing on either side stay
None, and so does their delta; nothing is defaulted to 0.
"""

import logging
from statistics import mean
from typing import Dict, List, Optional, Sequence

import pandas as pd

from insights.dataset import Dataset, StudentRecord, build_students, by_teacher
from insights.schema import AssessmentSchema, resolve_schema
from insights.settings import Settings
from insights.summary import qualifying, standard_rows

logger = logging.getLogger(__name__)


def _delta(before: Optional[float], after: Optional[float]) -> Optional[float]:
    if before is None or after is None:
        return None
    return round(after - before, 1)


def _union(first: Sequence[str], second: Sequence[str]) -> List[str]:
    out = list(first)
    for item in second:
        if item not in out:
            out.append(item)
    return out


def _pooled_mean(students: Sequence[StudentRecord]) -> Optional[float]:
    if not students:
        return None
    return round(mean(s.percentage for s in students), 1)


class _Side:
    """One resolved, filtered dataset."""

    def __init__(self, dataset: Dataset, settings: Settings):
        self.schema: AssessmentSchema = resolve_schema(dataset.header, dataset.standard_row)
        all_students = build_students(dataset, self.schema)
        self.students = qualifying(all_students)
        dropped = len(all_students) - len(self.students)
        if dropped:
            logger.info(f"Comparison: excluded {dropped} students with no scored questions")
        self.grouped = by_teacher(self.students)
        self.cells: Dict[str, Dict[str, Optional[int]]] = {}
        for teacher, students in self.grouped.items():
            rows = standard_rows(students, self.schema.questions, self.schema.standards, settings)
            self.cells[teacher] = {r["standard"]: (r["percentage"] if r["total"] else None) for r in rows}

    def cell(self, teacher: str, standard: str) -> Optional[int]:
        return self.cells.get(teacher, {}).get(standard)


def compare_assessments(before: Dataset, after: Dataset, settings: Optional[Settings] = None) -> Dict:
    settings = settings or Settings()
    a = _Side(before, settings)
    b = _Side(after, settings)

    teachers = _union(list(a.grouped), list(b.grouped))
    standards = _union(a.schema.standards, b.schema.standards)

    teacher_rows = []
    for teacher in teachers:
        cells = []
        for code in standards:
            pa, pb = a.cell(teacher, code), b.cell(teacher, code)
            cells.append({"standard": code, "before": pa, "after": pb, "delta": _delta(pa, pb)})
        avg_a = _pooled_mean(a.grouped.get(teacher, []))
        avg_b = _pooled_mean(b.grouped.get(teacher, []))
        teacher_rows.append({
            "teacher": teacher,
            "standards": cells,
            "students_before": len(a.grouped.get(teacher, [])),
            "students_after": len(b.grouped.get(teacher, [])),
            "average_before": avg_a,
            "average_after": avg_b,
            "average_delta": _delta(avg_a, avg_b),
        })

    overall_before = _pooled_mean(a.students)
    overall_after = _pooled_mean(b.students)

    return {
        "teachers": teacher_rows,
        "standards": standards,
        "student_comparisons": compare_students(a.students, b.students),
        "overall": {
            "before": overall_before,
            "after": overall_after,
            "delta": _delta(overall_before, overall_after),
            "students_before": len(a.students),
            "students_after": len(b.students),
        },
    }


def compare_students(before: Sequence[StudentRecord], after: Sequence[StudentRecord]) -> List[Dict]:
    """Students present on both sides, biggest regressions first."""
    if not before or not after:
        return []
    left = pd.DataFrame([
        {"student_id": s.student_id, "name": s.name, "teacher": s.teacher, "before": s.percentage}
        for s in before
    ]).drop_duplicates("student_id")
    right = pd.DataFrame([
        {"student_id": s.student_id, "teacher_after": s.teacher, "after": s.percentage}
        for s in after
    ]).drop_duplicates("student_id")

    merged = left.merge(right, on="student_id", how="inner")
    merged["delta"] = (merged["after"] - merged["before"]).round(1)
    merged = merged.sort_values("delta", kind="stable")
    logger.debug(f"Comparison: matched {len(merged)} of {len(left)} students")

    return [
        {
            "student_id": str(r["student_id"]),
            "name": str(r["name"]),
            "teacher": str(r["teacher_after"]),
            "before": float(r["before"]),
            "after": float(r["after"]),
            "delta": float(r["delta"]),
        }
        for r in merged.to_dict("records")
    ]
