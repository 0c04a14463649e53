from datetime import date

from engine import classifier
from engine.conf import setting
from engine.dates import days_between
from engine.records import Task, TaskStatus


def clamp(value: float, lower: float, upper: float) -> float:
    return float(max(lower, min(value, upper)))


def progress(task: Task, today: date) -> float:
    """
    Completion percentage of ``task`` in [0, 100].

    Rules, first match wins:

    1. done tasks are 100, even when some subtasks are still open;
    2. tasks with subtasks report the share of completed subtasks;
    3. in-progress tasks interpolate between start and due date, clamped
       to [10, 90] so date arithmetic alone never shows 0% or 100%.
       Without a due date, or when the due date is not after the start,
       they report 50;
    4. pending tasks are 0.

    A missing start date is taken to be ``today``.
    """
    if task.status == TaskStatus.DONE:
        return 100.0

    if task.subtasks:
        completed = sum(1 for sub in task.subtasks if sub.completed)
        return completed / len(task.subtasks) * 100

    if task.status == TaskStatus.IN_PROGRESS:
        if task.due_date is None:
            return float(setting('PROGRESS_NO_DUE_DATE'))

        start = task.start_date or today
        total_days = days_between(start, task.due_date)
        if total_days <= 0:
            return float(setting('PROGRESS_NO_DUE_DATE'))

        days_passed = days_between(start, today)
        raw = days_passed / total_days * 100
        return clamp(raw, setting('PROGRESS_FLOOR'), setting('PROGRESS_CEILING'))

    return 0.0


def progress_color(task: Task, today: date) -> str:
    """Color token for the progress bar; follows the urgency color."""
    if task.is_done:
        return classifier.GREEN
    color = classifier.classify(task, today).color
    if color in (classifier.RED, classifier.ORANGE, classifier.YELLOW):
        return color
    return classifier.BLUE
