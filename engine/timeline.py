"""
Gantt timeline geometry.

``layout`` puts every task on one shared day axis and returns positions in
days plus a ``day_width`` in abstract layout units. Drawing (pixels,
gridlines, labels) is left to the renderer.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Iterator, Optional, Tuple

from engine.conf import setting
from engine.dates import add_days, days_between
from engine.progress import progress
from engine.records import Task


@dataclass(frozen=True)
class TaskBar:
    task_id: str
    title: str
    status: str
    offset_days: int
    duration_days: int
    progress: float


@dataclass(frozen=True)
class SubtaskBar:
    task_id: str
    subtask_id: str
    description: str
    completed: bool
    offset_days: int
    width: float


@dataclass(frozen=True)
class TimelineLayout:
    window_start: date
    window_end: date
    total_days: int
    day_width: float
    bars: Tuple[TaskBar, ...]
    subtask_bars: Tuple[SubtaskBar, ...]

    def columns(self) -> Iterator[date]:
        """Header dates, one per day column, starting at the window start."""
        for i in range(self.total_days + 1):
            yield add_days(self.window_start, i)

    def left(self, bar) -> float:
        return bar.offset_days * self.day_width

    def width(self, bar: TaskBar) -> float:
        return bar.duration_days * self.day_width


def window(tasks: Iterable[Task], today: date) -> Tuple[date, date]:
    tasks = list(tasks)
    if not tasks:
        return today, today
    start = min(t.start_date or today for t in tasks)
    end = max(t.due_date or today for t in tasks)
    return start, end


def day_width_for(total_days: int, canvas_width: Optional[float] = None) -> float:
    if canvas_width is None:
        canvas_width = setting('TIMELINE_CANVAS_WIDTH')
    return max(float(setting('TIMELINE_MIN_DAY_WIDTH')), canvas_width / total_days)


def task_span(task: Task, window_start: date) -> Tuple[date, date]:
    start = task.start_date or window_start
    end = task.due_date or add_days(start, setting('TIMELINE_DEFAULT_TASK_DAYS'))
    return start, end


def layout(tasks: Iterable[Task], today: date, canvas_width: Optional[float] = None) -> TimelineLayout:
    """
    Lay out ``tasks`` on a shared timeline.

    The window runs from the earliest start to the latest due date, with
    ``today`` standing in for missing dates. An empty or single-day window
    falls back to a 30 day span. Tasks without a start begin at the window
    start; tasks without a due date get a one week bar. Durations include
    both endpoints. Subtasks have no dates of their own and are drawn as
    fixed width markers at their parent's offset.
    """
    tasks = list(tasks)
    window_start, window_end = window(tasks, today)

    total_days = days_between(window_start, window_end)
    if total_days <= 0:
        total_days = setting('TIMELINE_DEFAULT_SPAN_DAYS')

    day_width = day_width_for(total_days, canvas_width)
    marker_width = max(day_width * 2, float(setting('TIMELINE_MIN_MARKER_WIDTH')))

    bars = []
    subtask_bars = []
    for task in tasks:
        start, end = task_span(task, window_start)
        offset = days_between(window_start, start)
        bars.append(TaskBar(
            task_id=task.id,
            title=task.title,
            status=task.status.value,
            offset_days=offset,
            duration_days=days_between(start, end) + 1,
            progress=progress(task, today),
        ))
        for sub in task.subtasks:
            subtask_bars.append(SubtaskBar(
                task_id=task.id,
                subtask_id=sub.id,
                description=sub.description,
                completed=sub.completed,
                offset_days=offset,
                width=marker_width,
            ))

    return TimelineLayout(
        window_start=window_start,
        window_end=window_end,
        total_days=total_days,
        day_width=day_width,
        bars=tuple(bars),
        subtask_bars=tuple(subtask_bars),
    )
