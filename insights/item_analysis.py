"""
Item analysis: per-question correctness, distractors and mis-key flags.

The "correct answer" reported for a question is inferred from the first
student (in row order) whose score cell is correct. It is a heuristic, not an
answer key: if nobody answered correctly it is reported as '-'.
"""

import logging
import math
from typing import Dict, List, Sequence

import numpy as np

from insights.dataset import StudentRecord
from insights.parser import CellParser, Score, percent
from insights.schema import Question

logger = logging.getLogger(__name__)

HIGH_PERFORMER_SHARE = 0.25


def difficulty_label(pct_correct: int) -> str:
    if pct_correct < 50:
        return "hard"
    if pct_correct < 80:
        return "medium"
    return "easy"


def high_performers(students: Sequence[StudentRecord]) -> List[StudentRecord]:
    """Top quartile by percentage (at least one student); ties keep row order."""
    if not students:
        return []
    n = max(1, math.ceil(len(students) * HIGH_PERFORMER_SHARE))
    pcts = np.array([s.percentage for s in students], dtype=float)
    order = np.argsort(-pcts, kind="stable")[:n]
    return [students[int(i)] for i in order]


def rank_distractors(answers: Sequence[str]) -> List[Dict]:
    """Frequency table of wrong answers, most common first, ties by first seen."""
    counts: Dict[str, int] = {}
    for answer in answers:
        if CellParser.is_placeholder(answer):
            continue
        counts[answer] = counts.get(answer, 0) + 1
    # dicts keep insertion order, so a stable sort leaves ties in first-seen order
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [{"answer": a, "count": c} for a, c in ranked]


def analyze_question(
    question: Question,
    position: int,
    students: Sequence[StudentRecord],
    top_students: Sequence[StudentRecord],
) -> Dict:
    correct = [s for s in students if s.scores[position] is Score.CORRECT]
    incorrect = [s for s in students if s.scores[position] is Score.INCORRECT]
    unscored = len(students) - len(correct) - len(incorrect)

    distractors = rank_distractors([s.answers[position] for s in incorrect])
    top_wrong = distractors[0] if distractors else {"answer": "-", "count": 0}

    misses = sum(1 for s in top_students if s.scores[position] is Score.INCORRECT)
    pct_correct = percent(len(correct), len(students))

    return {
        "number": question.number,
        "standard": question.standard,
        "correct_answer": correct[0].answers[position] if correct else "-",
        "correct_count": len(correct),
        "incorrect_count": len(incorrect),
        "unscored_count": unscored,
        "total_students": len(students),
        "pct_correct": pct_correct,
        "difficulty": difficulty_label(pct_correct),
        "top_wrong_answer": top_wrong["answer"],
        "top_wrong_count": top_wrong["count"],
        "all_distractors": distractors,
        "high_performer_count": len(top_students),
        "high_performer_misses": misses,
        "review_flag": misses * 2 > len(top_students),
    }


def analyze_items(students: Sequence[StudentRecord], questions: Sequence[Question]) -> List[Dict]:
    """Item analysis for one teacher's students, ordered by question number."""
    top_students = high_performers(students)
    items = [
        analyze_question(q, pos, students, top_students)
        for pos, q in enumerate(questions)
    ]
    flagged = sum(1 for item in items if item["review_flag"])
    if flagged:
        logger.info(f"{flagged} of {len(items)} questions flagged for key review")
    return items


def analyze_items_by_teacher(
    grouped: Dict[str, List[StudentRecord]], questions: Sequence[Question]
) -> Dict[str, List[Dict]]:
    return {teacher: analyze_items(students, questions) for teacher, students in grouped.items()}
