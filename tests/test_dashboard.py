from datetime import date, time, timedelta
from types import SimpleNamespace

import dashboard

TODAY = date(2024, 3, 15)  # a Friday


def log(d, score):
    return SimpleNamespace(date=d, consistency_score=score)


def task(title, done=False, priority=0, category="general", d=TODAY):
    t = SimpleNamespace(title=title, is_completed=done, priority=priority, category=category, date=d)
    t.to_dict = lambda: {"title": t.title, "priority": t.priority, "is_completed": t.is_completed}
    return t


def block(label, start, end, done=False, category="work", d=TODAY):
    return SimpleNamespace(
        label=label, start_time=start, end_time=end, is_completed=done, category=category, date=d
    )


def test_score_trend_has_thirty_days_oldest_first():
    points = dashboard.score_trend([log(TODAY, 70), log(TODAY - timedelta(days=29), 10)], TODAY)
    assert len(points) == 30
    assert points[0] == {"date": "2024-02-15", "label": "Feb 15", "score": 10}
    assert points[-1]["score"] == 70
    assert all(p["score"] is None for p in points[1:-1])


def test_average_ignores_missing_days():
    points = [{"score": s} for s in (None, 40, None, 61)]
    assert dashboard.average_score(points) == 51
    assert dashboard.average_score([{"score": None}]) == 0


def test_week_over_week():
    assert dashboard.week_over_week([{"score": 50}] * 6) is None
    assert dashboard.week_over_week([{"score": 50}] * 7) is None

    points = [{"score": 40}] * 7 + [{"score": 60}] * 7
    assert dashboard.week_over_week(points) == 20

    # only one earlier day to compare against
    points = [{"score": 90}] + [{"score": 60}] * 7
    assert dashboard.week_over_week(points) == -30


def test_heatmap_grid():
    grid = dashboard.heatmap([log(TODAY, 85), log(TODAY - timedelta(days=1), 15)], TODAY)
    weeks = grid["weeks"]

    first = date.fromisoformat(weeks[0][0]["date"])
    assert first.weekday() == 6  # Sunday
    assert first <= TODAY - timedelta(days=364)
    assert all(len(w) == 7 for w in weeks[:-1])
    assert weeks[-1][-1] == {"date": "2024-03-15", "score": 85, "level": 5}
    assert weeks[-1][-2]["level"] == 1
    assert weeks[0][0]["level"] == 0

    assert grid["months"][0]["index"] == 0
    labels = [m["label"] for m in grid["months"]]
    assert labels[-1] == "Mar"


def test_heat_and_score_levels():
    assert [dashboard.heat_level(s) for s in (None, 0, 19, 20, 59, 60, 80)] == [0, 1, 1, 2, 3, 4, 5]
    assert [dashboard.score_level(s) for s in (100, 80, 79, 60, 40, 39)] == [
        "excellent",
        "excellent",
        "good",
        "good",
        "fair",
        "low",
    ]


def test_top_priorities():
    tasks = [task("a", priority=1), task("b"), task("c", priority=5), task("d", priority=2), task("e", priority=3)]
    assert [t.title for t in dashboard.top_priorities(tasks)] == ["c", "e", "d"]


def test_ordered_tasks_open_first():
    tasks = [task("done", done=True, priority=9), task("low"), task("high", priority=2)]
    assert [t.title for t in dashboard.ordered_tasks(tasks)] == ["high", "low", "done"]


def test_quote_is_stable_per_day():
    q = dashboard.quote_of_the_day(TODAY)
    assert q == dashboard.quote_of_the_day(TODAY)
    # 2024-03-15 is day 75
    text, author = dashboard.QUOTES[75 % len(dashboard.QUOTES)]
    assert q == {"text": text, "author": author}


def test_summary_without_history():
    s = dashboard.summary(TODAY, [], [], [])
    assert s["score"] == 0
    assert s["previous_score"] is None
    assert s["change"] is None
    assert s["streak"] == 0
    assert s["score_level"] == "low"
    assert s["average"] == 0


def test_block_minutes():
    assert dashboard.block_minutes(block("x", time(9, 15), time(10, 45))) == 90


def test_weekly_report_sections():
    logs = [log(TODAY, 80), log(TODAY - timedelta(days=1), 60), log(TODAY - timedelta(days=10), 90)]
    tasks = [task("Plan week", done=True, priority=1, d=TODAY - timedelta(days=1))]
    blocks = [
        block("Gym", time(7), time(8), done=True, category="health"),
        block("Code", time(9), time(12), category="work"),
    ]
    md = dashboard.weekly_report(TODAY, tasks, blocks, logs)

    assert "- Average score: **70/100** over **2** tracked days" in md
    assert "- Time blocks: **1/2** completed" in md
    assert "- Current streak: **2 days**" in md
    assert "- Fri 2024-03-15: 80" in md
    assert "- Sat 2024-03-09: -" in md
    assert md.index("- Work: 180 min") < md.index("- Health: 60 min")
    assert "- [x] **General**: Plan week ★" in md
    assert "- [x] 07:00-08:00 **Health**: Gym" in md
