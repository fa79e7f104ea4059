"""
Cell normalization for benchmark exports.

Export tools emit score cells as numbers or strings ("1", 1, 1.0, "1.0").
Everything is normalized once here so the analyzers only ever see `Score`.
"""

import math
import re
from enum import Enum
from typing import Any, Optional


class Score(Enum):
    CORRECT = 1
    INCORRECT = 0
    UNSCORED = None

    @property
    def is_scored(self) -> bool:
        return self is not Score.UNSCORED

    def to_cell(self) -> Optional[int]:
        """Heatmap cell value: 1, 0 or None."""
        return self.value


PLACEHOLDER_ANSWERS = frozenset({"", "-", "--", "n/a", "na", "none", "null", "*", "?"})

_PERCENT_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*%?\s*$")


class CellParser:
    """Utility helpers to turn raw export cells into typed values."""

    @staticmethod
    def text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, float):
            if math.isnan(value):
                return ""
            if value.is_integer():
                return str(int(value))
        return str(value).strip()

    @staticmethod
    def score(value: Any) -> Score:
        if isinstance(value, bool):
            return Score.UNSCORED
        if isinstance(value, (int, float)):
            if value == 1:
                return Score.CORRECT
            if value == 0:
                return Score.INCORRECT
            return Score.UNSCORED
        try:
            number = float(CellParser.text(value))
        except ValueError:
            return Score.UNSCORED
        if number == 1:
            return Score.CORRECT
        if number == 0:
            return Score.INCORRECT
        return Score.UNSCORED

    @staticmethod
    def percentage(value: Any) -> float:
        """Parse "85", "85%", 85.0 -> 85.0. Unparseable cells count as 0."""
        if isinstance(value, bool):
            return 0.0
        if isinstance(value, (int, float)):
            return 0.0 if isinstance(value, float) and math.isnan(value) else float(value)
        m = _PERCENT_RE.match(CellParser.text(value))
        return float(m.group(1)) if m else 0.0

    @staticmethod
    def is_placeholder(answer: str) -> bool:
        return answer.strip().lower() in PLACEHOLDER_ANSWERS


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent(correct: int, total: int) -> int:
    """Whole-number percentage, half rounded up; 0 when there is nothing to divide."""
    if total <= 0:
        return 0
    return round_half_up(correct * 100 / total)


def percent_or_none(correct: int, total: int) -> Optional[int]:
    return percent(correct, total) if total > 0 else None
