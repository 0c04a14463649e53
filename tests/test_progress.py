from datetime import date, timedelta

import pytest

from engine import progress, progress_color
from engine.records import TaskStatus


def test_done_task_is_complete_even_with_open_subtasks(make_record, today):
    task = make_record(status=TaskStatus.DONE, subtasks=[True, False, False])
    assert progress(task, today) == 100.0


def test_subtasks_report_completed_share(make_record, today):
    task = make_record(status='in_progress', subtasks=[True, False, False, False])
    assert progress(task, today) == 25.0


def test_subtasks_win_over_pending_status(make_record, today):
    task = make_record(status='pending', subtasks=[True, True])
    assert progress(task, today) == 100.0


def test_pending_without_subtasks_is_zero(make_record, today):
    task = make_record(status='pending', due_date=today)
    assert progress(task, today) == 0.0


def test_in_progress_without_due_date_is_half(make_record, today):
    assert progress(make_record(status='in_progress'), today) == 50.0


def test_in_progress_interpolates_between_start_and_due(make_record):
    base = date(2024, 1, 1)
    task = make_record(status='in_progress', start_date=base, due_date=base + timedelta(days=10))
    assert progress(task, base + timedelta(days=5)) == pytest.approx(50.0)


@pytest.mark.parametrize('offset, expected', [
    (0, 10.0),
    (1, 10.0),
    (9, 90.0),
    (30, 90.0),
])
def test_interpolation_is_clamped(make_record, offset, expected):
    base = date(2024, 1, 1)
    task = make_record(status='in_progress', start_date=base, due_date=base + timedelta(days=10))
    assert progress(task, base + timedelta(days=offset)) == expected


def test_missing_start_date_counts_from_today(make_record, today):
    task = make_record(status='in_progress', due_date=today + timedelta(days=10))
    assert progress(task, today) == 10.0


def test_due_on_or_before_start_is_half(make_record, today):
    task = make_record(status='in_progress', start_date=today, due_date=today - timedelta(days=2))
    assert progress(task, today) == 50.0


def test_progress_is_always_in_range(make_record, today):
    tasks = [
        make_record(status='in_progress', start_date=today - timedelta(days=400), due_date=today - timedelta(days=1)),
        make_record(status='in_progress', start_date=today + timedelta(days=5), due_date=today + timedelta(days=6)),
        make_record(status='pending', subtasks=[False]),
        make_record(status='done'),
    ]
    for task in tasks:
        assert 0.0 <= progress(task, today) <= 100.0


def test_progress_color_follows_urgency(make_record, today):
    assert progress_color(make_record(status='done', due_date=today - timedelta(days=3)), today) == 'green'
    assert progress_color(make_record(status='in_progress', due_date=today - timedelta(days=1)), today) == 'red'
    assert progress_color(make_record(status='in_progress', due_date=today), today) == 'orange'
    assert progress_color(make_record(status='in_progress', due_date=today + timedelta(days=2)), today) == 'yellow'
    assert progress_color(make_record(status='in_progress'), today) == 'blue'
