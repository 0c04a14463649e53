from datetime import date

import pytest

from engine import layout


def test_single_task_window(make_record):
    task = make_record(status='pending', start_date=date(2024, 1, 1), due_date=date(2024, 1, 10))
    timeline = layout([task], date(2024, 1, 5))

    assert timeline.window_start == date(2024, 1, 1)
    assert timeline.window_end == date(2024, 1, 10)
    assert timeline.total_days == 9
    assert timeline.day_width == pytest.approx(88.9, abs=0.05)

    bar = timeline.bars[0]
    assert bar.offset_days == 0
    assert bar.duration_days == 10
    assert timeline.left(bar) == 0
    assert timeline.width(bar) == pytest.approx(10 * 800 / 9)


def test_empty_collection_uses_default_span(today):
    timeline = layout([], today)
    assert timeline.window_start == timeline.window_end == today
    assert timeline.total_days == 30
    assert timeline.bars == ()


def test_day_width_has_a_minimum(make_record):
    task = make_record(start_date=date(2024, 1, 1), due_date=date(2024, 12, 31))
    assert layout([task], date(2024, 6, 1)).day_width == 20.0


def test_missing_dates_fall_back(make_record):
    anchored = make_record(start_date=date(2024, 1, 1), due_date=date(2024, 1, 31))
    no_start = make_record(due_date=date(2024, 1, 20))
    no_due = make_record(start_date=date(2024, 1, 5))
    timeline = layout([anchored, no_start, no_due], date(2024, 1, 10))

    bars = {bar.task_id: bar for bar in timeline.bars}
    # no start: begins at the window start
    assert bars[no_start.id].offset_days == 0
    assert bars[no_start.id].duration_days == 20
    # no due date: one week bar from its start
    assert bars[no_due.id].offset_days == 4
    assert bars[no_due.id].duration_days == 8


def test_subtask_markers_sit_at_parent_offset(make_record):
    first = make_record(start_date=date(2024, 1, 1), due_date=date(2024, 1, 5))
    second = make_record(start_date=date(2024, 1, 3), due_date=date(2024, 1, 9), subtasks=[True, False])
    timeline = layout([first, second], date(2024, 1, 4))

    assert [bar.subtask_id for bar in timeline.subtask_bars] == ['1', '2']
    assert all(bar.offset_days == 2 for bar in timeline.subtask_bars)
    assert all(bar.width == 2 * timeline.day_width for bar in timeline.subtask_bars)


def test_columns_cover_the_window(make_record):
    task = make_record(start_date=date(2024, 1, 1), due_date=date(2024, 1, 3))
    timeline = layout([task], date(2024, 1, 2))
    assert list(timeline.columns()) == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
