"""
Format-specific standard reports.

Two layouts, picked by the export's data format tag:

  standard_detail   standard rollup, item rollup with descriptions and
                    difficulties, reporting-category rollup with a total row
  standard_summary  per-student scores joined with scaled scores, and a
                    per-student breakdown by item difficulty

`standard_metadata` is supplied by the caller and is opaque here:
    item_descriptions    {question number: text}
    item_difficulties    {question number: label}
    reporting_categories {standard code: category label}
    scaled_scores        {student id: scaled score}
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from insights.dataset import StudentRecord
from insights.parser import CellParser, Score, percent
from insights.schema import Question

logger = logging.getLogger(__name__)

STANDARD_DETAIL = "standard_detail"
STANDARD_SUMMARY = "standard_summary"

UNCATEGORIZED = "Uncategorized"
UNKNOWN_BUCKET = "Unknown"
DIFFICULTY_BUCKETS = ("High", "Medium", "Low")

_DIFFICULTY_ALIASES = {"h": "High", "m": "Medium", "l": "Low", "hard": "High", "easy": "Low"}


def index_metadata(metadata: Optional[Mapping]) -> Dict[str, Dict[str, Any]]:
    """Re-key every metadata table by the text form of its keys (ints and strings both occur)."""
    return {
        section: {CellParser.text(k): v for k, v in (table or {}).items()}
        for section, table in (metadata or {}).items()
        if isinstance(table, Mapping) or table is None
    }


def _lookup(mapping: Optional[Mapping], key: Any) -> Any:
    if not mapping:
        return None
    return mapping.get(CellParser.text(key))


def difficulty_bucket(label: Any) -> str:
    text = CellParser.text(label).lower()
    if not text:
        return UNKNOWN_BUCKET
    return _DIFFICULTY_ALIASES.get(text, _DIFFICULTY_ALIASES.get(text[0], UNKNOWN_BUCKET))


def _counts(students: Sequence[StudentRecord], position: int) -> Dict[str, int]:
    correct = sum(1 for s in students if s.scores[position] is Score.CORRECT)
    incorrect = sum(1 for s in students if s.scores[position] is Score.INCORRECT)
    return {"correct": correct, "incorrect": incorrect, "total": correct + incorrect}


def _finish(row: Dict) -> Dict:
    row["percentage"] = percent(row["correct"], row["total"])
    return row


# ─────────────────────────────────────────────
# STANDARD WITH DETAIL
# ─────────────────────────────────────────────

def standard_rollup(students, questions, standards) -> List[Dict]:
    rows = {code: {"standard": code, "correct": 0, "incorrect": 0, "total": 0} for code in standards}
    for pos, q in enumerate(questions):
        for key, value in _counts(students, pos).items():
            rows[q.standard][key] += value
    return [_finish(rows[code]) for code in standards]


def item_rollup(students, questions, metadata: Mapping) -> List[Dict]:
    items = []
    for pos, q in enumerate(questions):
        difficulty = _lookup(metadata.get("item_difficulties"), q.number)
        items.append(_finish({
            "number": q.number,
            "standard": q.standard,
            "description": CellParser.text(_lookup(metadata.get("item_descriptions"), q.number)),
            "difficulty": CellParser.text(difficulty),
            "difficulty_bucket": difficulty_bucket(difficulty),
            **_counts(students, pos),
        }))
    return items


def category_rollup(standard_rows: Sequence[Dict], metadata: Mapping) -> List[Dict]:
    categories: Dict[str, Dict] = {}
    for row in standard_rows:
        label = CellParser.text(_lookup(metadata.get("reporting_categories"), row["standard"])) or UNCATEGORIZED
        cat = categories.setdefault(label, {
            "category": label, "standards": [], "correct": 0, "incorrect": 0, "total": 0,
        })
        cat["standards"].append(row["standard"])
        for key in ("correct", "incorrect", "total"):
            cat[key] += row[key]

    rows = [_finish(c) for c in categories.values()]
    total = {"category": "Total", "standards": [s["standard"] for s in standard_rows]}
    for key in ("correct", "incorrect", "total"):
        total[key] = sum(r[key] for r in rows)
    rows.append(_finish(total))
    return rows


def standard_detail_report(students, questions, standards, metadata: Mapping) -> Dict:
    metadata = index_metadata(metadata)
    by_standard = standard_rollup(students, questions, standards)
    return {
        "format": STANDARD_DETAIL,
        "standards": by_standard,
        "items": item_rollup(students, questions, metadata),
        "categories": category_rollup(by_standard, metadata),
    }


# ─────────────────────────────────────────────
# STANDARD WITHOUT DETAIL
# ─────────────────────────────────────────────

def student_score_table(students: Sequence[StudentRecord], metadata: Mapping) -> List[Dict]:
    rows = []
    for s in students:
        correct = sum(1 for sc in s.scores if sc is Score.CORRECT)
        total = sum(1 for sc in s.scores if sc.is_scored)
        scaled = _lookup(metadata.get("scaled_scores"), s.student_id)
        rows.append({
            "teacher": s.teacher,
            "name": s.name,
            "student_id": s.student_id,
            "correct": correct,
            "total": total,
            "percentage": percent(correct, total),
            "scaled_score": scaled if scaled not in (None, "") else None,
        })
    if not rows:
        return rows
    df = pd.DataFrame({"teacher": [r["teacher"] for r in rows], "name": [r["name"] for r in rows]})
    order = df.sort_values(["teacher", "name"], kind="stable").index.tolist()
    return [rows[i] for i in order]


def difficulty_breakdown(students, questions, metadata: Mapping) -> Dict:
    buckets = [difficulty_bucket(_lookup(metadata.get("item_difficulties"), q.number)) for q in questions]
    present = [b for b in DIFFICULTY_BUCKETS if b in buckets]
    if UNKNOWN_BUCKET in buckets:
        present.append(UNKNOWN_BUCKET)

    totals = {b: {"correct": 0, "total": 0} for b in present}
    rows = []
    for s in students:
        per_bucket = {b: {"correct": 0, "total": 0} for b in present}
        for bucket, score in zip(buckets, s.scores):
            if not score.is_scored:
                continue
            hit = 1 if score is Score.CORRECT else 0
            per_bucket[bucket]["correct"] += hit
            per_bucket[bucket]["total"] += 1
            totals[bucket]["correct"] += hit
            totals[bucket]["total"] += 1
        rows.append({"teacher": s.teacher, "name": s.name, "student_id": s.student_id, "buckets": per_bucket})

    for counts in totals.values():
        counts["percentage"] = percent(counts["correct"], counts["total"])
    return {"buckets": present, "students": rows, "totals": totals}


def standard_summary_report(students, questions, metadata: Mapping) -> Dict:
    metadata = index_metadata(metadata)
    return {
        "format": STANDARD_SUMMARY,
        "student_scores": student_score_table(students, metadata),
        "difficulty_breakdown": difficulty_breakdown(students, questions, metadata),
    }


def build_format_sections(
    data_format: Optional[str],
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standards: Sequence[str],
    metadata: Optional[Mapping] = None,
) -> Optional[Dict]:
    """Dispatch on the data format tag; None when the format has no extra layout."""
    metadata = metadata or {}
    if data_format == STANDARD_DETAIL:
        return standard_detail_report(students, questions, standards, metadata)
    if data_format == STANDARD_SUMMARY:
        return standard_summary_report(students, questions, metadata)
    logger.info(f"No format-specific layout for data format {data_format!r}")
    return None
