"""
Score heatmaps: student x question and teacher x standard.
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from insights.dataset import StudentRecord
from insights.parser import Score, percent_or_none, round_half_up
from insights.schema import Question

logger = logging.getLogger(__name__)

CLASS_AVERAGE_LABEL = "Class Average"
ALL_TEACHERS_LABEL = "All Teachers"


def _score_frame(students: Sequence[StudentRecord], questions: Sequence[Question]) -> pd.DataFrame:
    """Long-form frame of scored attempts: teacher, standard, question, correct."""
    rows = []
    for s in students:
        for q, score in zip(questions, s.scores):
            if score.is_scored:
                rows.append({
                    "teacher": s.teacher,
                    "standard": q.standard,
                    "question": q.number,
                    "correct": 1 if score is Score.CORRECT else 0,
                })
    return pd.DataFrame(rows, columns=["teacher", "standard", "question", "correct"])


def _pooled(df: pd.DataFrame, by: str) -> Dict:
    if df.empty:
        return {}
    agg = df.groupby(by, sort=False)["correct"].agg(["sum", "count"])
    return {key: percent_or_none(int(r["sum"]), int(r["count"])) for key, r in agg.iterrows()}


def student_question_heatmap(
    students: Sequence[StudentRecord], questions: Sequence[Question]
) -> Dict:
    rows = [
        {
            "teacher": s.teacher,
            "name": s.name,
            "score_pct": s.percentage,
            "question_scores": [score.to_cell() for score in s.scores],
        }
        for s in students
    ]
    by_question = _pooled(_score_frame(students, questions), "question")
    pcts = [s.percentage for s in students]
    rows.append({
        "teacher": "",
        "name": CLASS_AVERAGE_LABEL,
        "score_pct": round_half_up(sum(pcts) / len(pcts)) if pcts else None,
        "question_scores": [by_question.get(q.number) for q in questions],
    })
    return {
        "questions": [{"number": q.number, "standard": q.standard} for q in questions],
        "rows": rows,
    }


def teacher_standard_heatmap(
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standards: Sequence[str],
) -> Dict:
    """One row per teacher, one cell per standard; the last row pools every teacher."""
    df = _score_frame(students, questions)
    teachers: List[str] = []
    for s in students:
        if s.teacher not in teachers:
            teachers.append(s.teacher)

    rows = []
    for teacher in teachers:
        cells = _pooled(df[df["teacher"] == teacher], "standard")
        rows.append({"teacher": teacher, "values": [cells.get(code) for code in standards]})

    overall = _pooled(df, "standard")
    rows.append({"teacher": ALL_TEACHERS_LABEL, "values": [overall.get(code) for code in standards]})
    return {"standards": list(standards), "rows": rows}


def build_heatmaps(
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standards: Sequence[str],
) -> Dict[str, Dict]:
    return {
        "student_question": student_question_heatmap(students, questions),
        "teacher_standard": teacher_standard_heatmap(students, questions, standards),
    }


def cell_value(matrix: Dict, teacher: str, standard: str) -> Optional[int]:
    """Look up one teacher/standard cell, None when absent."""
    if standard not in matrix["standards"]:
        return None
    col = matrix["standards"].index(standard)
    for row in matrix["rows"]:
        if row["teacher"] == teacher:
            return row["values"][col]
    return None
