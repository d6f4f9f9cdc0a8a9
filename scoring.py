"""
Consistency score and streak calculations.

Everything here is pure: callers hand in the records they loaded, nothing is
read from or written to the database.
"""

import math
from dataclasses import dataclass
from datetime import timedelta

TASK_WEIGHT = 0.5
BLOCK_WEIGHT = 0.5
STREAK_BONUS_PER_DAY = 0.02
MAX_STREAK_BONUS = 0.2
STREAK_SCAN_DAYS = 366


@dataclass(frozen=True)
class ScoreResult:
    score: int
    tasks_completed: int
    tasks_total: int
    blocks_completed: int
    blocks_total: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (round() would pick the even side)."""
    return int(math.floor(value + 0.5))


def count_streak(logs, today, max_days: int = STREAK_SCAN_DAYS) -> int:
    """
    Count consecutive days ending at `today` whose daily log has a score > 0.

    `logs` is any iterable of objects with `date` and `consistency_score`.
    Logs dated after `today` are ignored. A missing or zero day at `today`
    itself does not break the streak (the day may not be scored yet); one at
    any earlier day does.
    """
    scores = {}
    for log in logs:
        if log.date <= today:
            scores[log.date] = log.consistency_score

    streak = 0
    for i in range(max_days):
        score = scores.get(today - timedelta(days=i))
        if score is not None and score > 0:
            streak += 1
        elif i > 0:
            break
    return streak


def streak_multiplier(streak_days: int) -> float:
    return 1 + min(streak_days * STREAK_BONUS_PER_DAY, MAX_STREAK_BONUS)


def score_from_counts(tasks_completed, tasks_total, blocks_completed, blocks_total, streak_days) -> int:
    if tasks_total == 0 and blocks_total == 0:
        return 0

    task_score = tasks_completed / tasks_total * 100 if tasks_total > 0 else 0
    block_score = blocks_completed / blocks_total * 100 if blocks_total > 0 else 0

    # a category with no entries is left out, not counted as 0%
    if tasks_total > 0 and blocks_total > 0:
        base = task_score * TASK_WEIGHT + block_score * BLOCK_WEIGHT
    elif tasks_total > 0:
        base = task_score
    else:
        base = block_score

    return round_half_up(min(base * streak_multiplier(streak_days), 100))


def calculate_consistency_score(tasks, blocks, logs, on_date) -> ScoreResult:
    """Score one day from its tasks, time blocks and the user's daily log history."""
    tasks_total = len(tasks)
    tasks_completed = sum(1 for t in tasks if t.is_completed)
    blocks_total = len(blocks)
    blocks_completed = sum(1 for b in blocks if b.is_completed)

    if tasks_total == 0 and blocks_total == 0:
        return ScoreResult(0, 0, 0, 0, 0)

    streak = count_streak(logs, on_date)
    score = score_from_counts(tasks_completed, tasks_total, blocks_completed, blocks_total, streak)
    return ScoreResult(score, tasks_completed, tasks_total, blocks_completed, blocks_total)
