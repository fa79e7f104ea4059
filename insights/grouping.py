"""
Remediation group formation.

Students are profiled by the standards they are weak on, then clustered
greedily so that each group shares as many weak standards as possible:

  1. Sort the pool by weak-standard count, most first.
  2. Pop the front student as the group's core; `shared` = core's weak set.
  3. Scan the rest of the pool from the tail backwards. A candidate joins when
     it overlaps `shared` on at least half of `shared` (rounded up); `shared`
     then narrows to the intersection.
  4. If the group is still below the minimum size, backfill it (tail-first)
     with anyone sharing at least one standard with `shared`.
  5. If the group is above the maximum size, keep the first members (core
     first, join order) and push the overflow back onto the front of the pool.

Acceptance order shapes the final groups. Given the same input order and
settings the result is always the same.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from insights.dataset import UNKNOWN_PERIOD, StudentRecord
from insights.schema import Question
from insights.settings import Settings

logger = logging.getLogger(__name__)

OVERLAP_RATIO = 0.5


@dataclass
class StudentProfile:
    student_id: str
    name: str
    teacher: str
    period: str
    per_standard: Dict[str, List[int]] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: StudentRecord, questions: Sequence[Question]) -> "StudentProfile":
        return cls(
            student_id=record.student_id,
            name=record.name,
            teacher=record.teacher,
            period=record.period,
            per_standard=record.tally(questions),
        )

    def weak_standards(self, threshold: float) -> frozenset:
        return frozenset(
            code for code, (correct, total) in self.per_standard.items()
            if total > 0 and correct / total * 100 < threshold
        )


@dataclass(frozen=True)
class Candidate:
    student_id: str
    name: str
    weak: frozenset


def build_profiles(students: Iterable[StudentRecord], questions: Sequence[Question]) -> List[StudentProfile]:
    return [StudentProfile.from_record(s, questions) for s in students]


def weak_candidates(profiles: Iterable[StudentProfile], threshold: float) -> List[Candidate]:
    """Profiles with at least one weak standard, in input order."""
    candidates = []
    for p in profiles:
        weak = p.weak_standards(threshold)
        if weak:
            candidates.append(Candidate(p.student_id, p.name, weak))
    return candidates


def cluster(candidates: Sequence[Candidate], min_size: int, max_size: int) -> List[Dict]:
    """
    Greedy overlap clustering. Returns [{"members": [...], "shared": frozenset}]
    in formation order.
    """
    pool = sorted(candidates, key=lambda c: -len(c.weak))
    groups = []

    while pool:
        core = pool.pop(0)
        members = [core]
        shared = core.weak

        for i in range(len(pool) - 1, -1, -1):
            cand = pool[i]
            needed = math.ceil(len(shared) * OVERLAP_RATIO)
            if len(cand.weak & shared) >= needed:
                members.append(cand)
                shared = shared & cand.weak
                del pool[i]

        if len(members) < min_size:
            for i in range(len(pool) - 1, -1, -1):
                if len(members) >= min_size:
                    break
                if pool[i].weak & shared:
                    members.append(pool.pop(i))

        if len(members) > max_size:
            overflow = members[max_size:]
            members = members[:max_size]
            pool[0:0] = overflow
            logger.debug(f"Group over max size, re-queued {len(overflow)} students")

        groups.append({"members": members, "shared": shared})
    return groups


def _ordered(codes: frozenset, standard_order: Sequence[str]) -> List[str]:
    rank = {code: i for i, code in enumerate(standard_order)}
    return sorted(codes, key=lambda c: (rank.get(c, len(rank)), c))


def _periods_in_order(profiles: Sequence[StudentProfile]) -> List[str]:
    periods: List[str] = []
    for p in profiles:
        if p.period not in periods:
            periods.append(p.period)
    # unknown period goes last
    if UNKNOWN_PERIOD in periods:
        periods.remove(UNKNOWN_PERIOD)
        periods.append(UNKNOWN_PERIOD)
    return periods


def form_groups(
    profiles: Sequence[StudentProfile],
    standard_order: Sequence[str],
    settings: Settings,
) -> List[Dict]:
    """Cluster profiles into remediation groups per teacher, then per period."""
    by_teacher: Dict[str, List[StudentProfile]] = {}
    for p in profiles:
        by_teacher.setdefault(p.teacher, []).append(p)

    groups = []
    for teacher, teacher_profiles in by_teacher.items():
        for period in _periods_in_order(teacher_profiles):
            members = [p for p in teacher_profiles if p.period == period]
            candidates = weak_candidates(members, settings.group_weakness_threshold)
            clusters = cluster(candidates, settings.group_min_size, settings.group_max_size)
            for number, c in enumerate(clusters, 1):
                groups.append({
                    "teacher": teacher,
                    "period": period,
                    "group_number": number,
                    "student_names": [m.name for m in c["members"]],
                    "student_ids": [m.student_id for m in c["members"]],
                    "shared_weak_standards": _ordered(c["shared"], standard_order),
                    "student_count": len(c["members"]),
                    "is_unknown_period": period == UNKNOWN_PERIOD,
                })
            logger.debug(
                f"{teacher} / {period}: {len(candidates)} weak students -> {len(clusters)} groups"
            )
    logger.info(f"Formed {len(groups)} remediation groups")
    return groups


def groups_for_students(
    students: Sequence[StudentRecord],
    questions: Sequence[Question],
    standard_order: Sequence[str],
    settings: Settings,
) -> List[Dict]:
    return form_groups(build_profiles(students, questions), standard_order, settings)
