"""
Standard mastery summaries per teacher and for the whole district.
"""

import logging
from statistics import mean
from typing import Dict, List, Optional, Sequence

import pandas as pd

from insights.dataset import StudentRecord
from insights.parser import percent, round_half_up
from insights.schema import Question
from insights.settings import Settings

logger = logging.getLogger(__name__)

GROWTH = "growth"
MONITOR = "monitor"
STRENGTH = "strength"


def categorize(pct: float, settings: Settings) -> str:
    if pct < settings.growth_threshold:
        return GROWTH
    if pct >= settings.strength_threshold:
        return STRENGTH
    return MONITOR


def student_color(pct: float, settings: Settings) -> str:
    return {GROWTH: "red", MONITOR: "yellow", STRENGTH: "green"}[categorize(pct, settings)]


def qualifying(students: Sequence[StudentRecord]) -> List[StudentRecord]:
    """Students with at least one scored question."""
    return [s for s in students if s.has_scored]


def standard_rows(
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standards: Sequence[str],
    settings: Settings,
) -> List[Dict]:
    """Pooled correct/total per standard plus red/yellow/green student tallies."""
    rows = {code: {"standard": code, "correct": 0, "total": 0,
                   "red_count": 0, "yellow_count": 0, "green_count": 0}
            for code in standards}

    for student in students:
        for code, (correct, total) in student.tally(questions).items():
            row = rows[code]
            row["correct"] += correct
            row["total"] += total
            color = student_color(correct / total * 100, settings)
            row[f"{color}_count"] += 1

    out = []
    for code in standards:
        row = rows[code]
        row["percentage"] = percent(row["correct"], row["total"])
        row["category"] = categorize(row["percentage"], settings) if row["total"] else None
        out.append(row)
    return out


def _format_sol(row: Optional[Dict]) -> str:
    if row is None:
        return "-"
    return f"{row['standard']} ({row['percentage']}%)"


def bucket_standards(rows: Sequence[Dict]) -> Dict:
    """Growth/monitor/strength lists plus worst and best standard."""
    scored = [r for r in rows if r["total"] > 0]
    ranked = sorted(scored, key=lambda r: r["percentage"])
    return {
        GROWTH: [r["standard"] for r in scored if r["category"] == GROWTH],
        MONITOR: [r["standard"] for r in scored if r["category"] == MONITOR],
        STRENGTH: [r["standard"] for r in scored if r["category"] == STRENGTH],
        "worst_sol": _format_sol(ranked[0] if ranked else None),
        "best_sol": _format_sol(ranked[-1] if ranked else None),
    }


def summarize_students(
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standards: Sequence[str],
    settings: Settings,
) -> Dict:
    valid = qualifying(students)
    rows = standard_rows(valid, questions, standards, settings)
    total_correct = sum(r["correct"] for r in rows)
    total_answered = sum(r["total"] for r in rows)
    return {
        "student_count": len(valid),
        "average": percent(total_correct, total_answered),
        "total_correct": total_correct,
        "total_answered": total_answered,
        "standards": rows,
        **bucket_standards(rows),
    }


def summarize_teacher(
    teacher: str,
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standards: Sequence[str],
    settings: Settings,
) -> Dict:
    summary = summarize_students(students, questions, standards, settings)
    logger.debug(f"{teacher}: {summary['student_count']} students, average {summary['average']}%")
    return {"teacher": teacher, **summary}


def summarize_teachers(
    grouped: Dict[str, List[StudentRecord]],
    questions: Sequence[Question],
    standards: Sequence[str],
    settings: Settings,
) -> List[Dict]:
    return [summarize_teacher(t, s, questions, standards, settings) for t, s in grouped.items()]


def summarize_district(
    teacher_summaries: Sequence[Dict],
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standards: Sequence[str],
    settings: Settings,
) -> Dict:
    """
    District roll-up.

    Teachers without qualifying students are dropped. The overall average is
    the plain mean of teacher averages, so each teacher weighs the same
    regardless of class size. Standard rows are pooled over all students.
    """
    active = [t for t in teacher_summaries if t["student_count"] > 0]
    if active:
        df = pd.DataFrame([{"teacher": t["teacher"], "average": t["average"]} for t in active])
        order = df.sort_values("average", ascending=False, kind="stable").index.tolist()
        ranked = [active[i] for i in order]
    else:
        ranked = []

    pooled = summarize_students(students, questions, standards, settings)
    return {
        "teachers": [
            {
                "teacher": t["teacher"],
                "student_count": t["student_count"],
                "average": t["average"],
                "worst_sol": t["worst_sol"],
                "best_sol": t["best_sol"],
                "growth_count": len(t[GROWTH]),
                "monitor_count": len(t[MONITOR]),
                "strength_count": len(t[STRENGTH]),
            }
            for t in ranked
        ],
        "teacher_count": len(ranked),
        "overall_average": round_half_up(mean(t["average"] for t in ranked)) if ranked else 0,
        "student_count": pooled["student_count"],
        "pooled_average": pooled["average"],
        "standards": pooled["standards"],
        GROWTH: pooled[GROWTH],
        MONITOR: pooled[MONITOR],
        STRENGTH: pooled[STRENGTH],
        "worst_sol": pooled["worst_sol"],
        "best_sol": pooled["best_sol"],
    }
