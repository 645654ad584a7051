# tests/test_activity.py
from datetime import date, timedelta

from edustream.activity import calc_streak, get_logs, get_rank, get_streak, heatmap, log_activity

TODAY = date(2024, 6, 15)


def days_back(*offsets):
    return [TODAY - timedelta(days=n) for n in offsets]


def test_streak_empty():
    assert calc_streak([], TODAY) == 0


def test_streak_including_today():
    assert calc_streak(days_back(0, 1, 2, 4), TODAY) == 3


def test_streak_alive_from_yesterday():
    assert calc_streak(days_back(1, 2), TODAY) == 2


def test_streak_broken():
    assert calc_streak(days_back(2, 3, 4), TODAY) == 0


def test_streak_across_month_boundary():
    today = date(2024, 3, 1)
    days = [date(2024, 3, 1), date(2024, 2, 29), date(2024, 2, 28)]
    assert calc_streak(days, today) == 3


def test_rank_tiers():
    assert get_rank(0) == "Novice"
    assert get_rank(5 * 3600 - 1) == "Novice"
    assert get_rank(5 * 3600) == "Apprentice"
    assert get_rank(20 * 3600) == "Scholar"
    assert get_rank(50 * 3600) == "Master"
    assert get_rank(100 * 3600) == "Grand Master"


def test_log_activity_counts_per_day(ready_db):
    log_activity(ready_db, TODAY)
    log_activity(ready_db, TODAY)
    log_activity(ready_db, TODAY - timedelta(days=1))
    logs = get_logs(ready_db)
    assert [(l.date, l.count) for l in logs] == [
        ("2024-06-15", 2),
        ("2024-06-14", 1),
    ]
    assert get_streak(ready_db, TODAY) == 2


def test_heatmap_zero_fills(ready_db):
    log_activity(ready_db, TODAY)
    log_activity(ready_db, TODAY - timedelta(days=3))
    cells = heatmap(ready_db, days=7, today=TODAY)
    assert len(cells) == 7
    assert cells[0].date == "2024-06-09"
    assert cells[-1].date == "2024-06-15"
    assert [c.count for c in cells] == [0, 0, 0, 1, 0, 0, 1]
