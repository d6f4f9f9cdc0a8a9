"""
Read-only views over stored daily logs, tasks and time blocks: the numbers
the dashboard shows and the day/week exports. Nothing here scores a day;
scores come from the stored daily logs.
"""

import csv
import io
from datetime import datetime, timedelta

from categories import category_info
from scoring import count_streak, round_half_up

TREND_DAYS = 30
HEATMAP_DAYS = 365
TOP_PRIORITIES = 3

QUOTES = [
    ("The secret of getting ahead is getting started.", "Mark Twain"),
    ("Success is the sum of small efforts repeated day in and day out.", "Robert Collier"),
    ("Consistency is what transforms average into excellence.", "Unknown"),
    ("It's not what we do once in a while that shapes our lives. It's what we do consistently.", "Tony Robbins"),
    ("Small daily improvements over time lead to stunning results.", "Robin Sharma"),
    ("The only way to do great work is to love what you do.", "Steve Jobs"),
    ("Discipline is choosing between what you want now and what you want most.", "Abraham Lincoln"),
    ("You don't have to be great to start, but you have to start to be great.", "Zig Ziglar"),
    ("Excellence is not a singular act, but a habit. You are what you repeatedly do.", "Shaquille O'Neal"),
    ("The difference between ordinary and extraordinary is that little extra.", "Jimmy Johnson"),
]


def _scores_by_date(logs):
    return {log.date: log.consistency_score for log in logs}


def _short_label(d):
    return f"{d.strftime('%b')} {d.day}"


def score_level(score: int) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    return "low"


def heat_level(score) -> int:
    """Heatmap intensity 0..5; 0 means no log for that day."""
    if score is None:
        return 0
    if score >= 80:
        return 5
    if score >= 60:
        return 4
    if score >= 40:
        return 3
    if score >= 20:
        return 2
    return 1


def score_trend(logs, today, days: int = TREND_DAYS):
    """One point per day for the last `days` days, oldest first; days without a log have score None."""
    scores = _scores_by_date(logs)
    points = []
    for i in range(days):
        d = today - timedelta(days=days - 1 - i)
        points.append({"date": d.isoformat(), "label": _short_label(d), "score": scores.get(d)})
    return points


def average_score(points) -> int:
    scores = [p["score"] for p in points if p["score"] is not None]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def week_over_week(points):
    """Mean of the last 7 scored days minus the mean of the (up to) 7 before them."""
    scores = [p["score"] for p in points if p["score"] is not None]
    if len(scores) < 7:
        return None
    recent = scores[-7:]
    previous = scores[-14:-7]
    if not previous:
        return None
    return round_half_up(sum(recent) / len(recent) - sum(previous) / len(previous))


def _week_start(d):
    # weeks start on Sunday
    return d - timedelta(days=(d.weekday() + 1) % 7)


def heatmap(logs, today, days: int = HEATMAP_DAYS):
    """Year grid: columns of 7 days from the Sunday on/before today-364 through today."""
    scores = _scores_by_date(logs)
    start = _week_start(today - timedelta(days=days - 1))

    weeks = []
    week = []
    current = start
    while current <= today:
        score = scores.get(current)
        week.append({"date": current.isoformat(), "score": score, "level": heat_level(score)})
        if len(week) == 7:
            weeks.append(week)
            week = []
        current += timedelta(days=1)
    if week:
        weeks.append(week)

    months = []
    last_month = None
    for index, column in enumerate(weeks):
        first = datetime.strptime(column[0]["date"], "%Y-%m-%d").date()
        if first.month != last_month:
            months.append({"label": first.strftime("%b"), "index": index})
            last_month = first.month

    return {"weeks": weeks, "months": months}


def top_priorities(tasks, limit: int = TOP_PRIORITIES):
    prioritized = [t for t in tasks if t.priority > 0]
    prioritized.sort(key=lambda t: t.priority, reverse=True)
    return prioritized[:limit]


def ordered_tasks(tasks):
    """Open tasks first, then by priority, highest first."""
    return sorted(tasks, key=lambda t: (t.is_completed, -t.priority))


def quote_of_the_day(today):
    text, author = QUOTES[today.timetuple().tm_yday % len(QUOTES)]
    return {"text": text, "author": author}


def summary(day, tasks, blocks, logs):
    """Everything the dashboard renders for `day`."""
    scores = _scores_by_date(logs)
    score = scores.get(day) or 0
    previous = scores.get(day - timedelta(days=1))
    trend = score_trend(logs, day)

    return {
        "date": day.isoformat(),
        "score": score,
        "previous_score": previous,
        "change": None if previous is None else score - previous,
        "score_level": score_level(score),
        "streak": count_streak(logs, day),
        "trend": trend,
        "average": average_score(trend),
        "week_over_week": week_over_week(trend),
        "heatmap": heatmap(logs, day),
        "priorities": [t.to_dict() for t in top_priorities(tasks)],
        "tasks": [t.to_dict() for t in ordered_tasks(tasks)],
        "tasks_completed": sum(1 for t in tasks if t.is_completed),
        "time_blocks": [b.to_dict() for b in sorted(blocks, key=lambda b: b.start_time)],
        "blocks_completed": sum(1 for b in blocks if b.is_completed),
        "quote": quote_of_the_day(day),
    }


def block_minutes(block) -> int:
    start = block.start_time.hour * 60 + block.start_time.minute
    end = block.end_time.hour * 60 + block.end_time.minute
    return max(end - start, 0)


def day_csv(tasks, blocks) -> str:
    """CSV export of one day's tasks and time blocks."""
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(["Type", "Date", "Category", "Title", "Time", "Status", "Priority"])
    for t in ordered_tasks(tasks):
        status = "Done" if t.is_completed else "Pending"
        writer.writerow(["Task", t.date.isoformat(), category_info(t.category).label, t.title, "-", status, t.priority])

    for b in sorted(blocks, key=lambda b: b.start_time):
        status = "Done" if b.is_completed else "Pending"
        span = f"{b.start_time.strftime('%H:%M')}-{b.end_time.strftime('%H:%M')}"
        writer.writerow(["Block", b.date.isoformat(), category_info(b.category).label, b.label, span, status, "-"])

    return output.getvalue()


def weekly_report(end_day, tasks, blocks, logs) -> str:
    """Markdown report for the 7 days ending at `end_day`."""
    start_day = end_day - timedelta(days=6)
    scores = _scores_by_date(logs)
    week_scores = [scores[start_day + timedelta(days=i)] for i in range(7) if start_day + timedelta(days=i) in scores]

    done_tasks = sum(1 for t in tasks if t.is_completed)
    done_blocks = sum(1 for b in blocks if b.is_completed)
    avg = round_half_up(sum(week_scores) / len(week_scores)) if week_scores else 0

    # Planned minutes per category
    by_cat = {}
    for b in blocks:
        label = category_info(b.category).label
        by_cat[label] = by_cat.get(label, 0) + block_minutes(b)

    lines = []
    lines.append(f"# Weekly Consistency Report ({start_day} → {end_day})")
    lines.append("")
    lines.append("## Summary")
    lines.append(f"- Average score: **{avg}/100** over **{len(week_scores)}** tracked days")
    lines.append(f"- Tasks: **{done_tasks}/{len(tasks)}** completed")
    lines.append(f"- Time blocks: **{done_blocks}/{len(blocks)}** completed")
    lines.append(f"- Current streak: **{count_streak(logs, end_day)} days**")
    lines.append("")
    lines.append("## Daily Scores")
    for i in range(7):
        d = start_day + timedelta(days=i)
        score = scores.get(d)
        lines.append(f"- {d.strftime('%a')} {d}: {'-' if score is None else score}")
    lines.append("")
    lines.append("## Time by Category")
    for cat, mins in sorted(by_cat.items(), key=lambda x: x[1], reverse=True):
        lines.append(f"- {cat}: {mins} min ({mins/60:.2f} hrs)")
    lines.append("")
    lines.append("## Daily Notes")
    entries = [(t.date, "task", t) for t in tasks] + [(b.date, "block", b) for b in blocks]
    entries.sort(key=lambda e: (e[0], e[1] == "task"))
    current = None
    for d, kind, item in entries:
        if d != current:
            current = d
            lines.append(f"### {current}")
        mark = "x" if item.is_completed else " "
        if kind == "block":
            span = f"{item.start_time.strftime('%H:%M')}-{item.end_time.strftime('%H:%M')}"
            lines.append(f"- [{mark}] {span} **{category_info(item.category).label}**: {item.label}")
        else:
            star = " ★" if item.priority > 0 else ""
            lines.append(f"- [{mark}] **{category_info(item.category).label}**: {item.title}{star}")

    return "\n".join(lines)
