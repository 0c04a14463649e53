from dataclasses import dataclass
from datetime import date
from typing import Optional

from engine.conf import setting
from engine.dates import days_between
from engine.records import Task


# States
DONE = 'done'
NO_DATE = 'no-date'
OVERDUE = 'overdue'
TODAY = 'today'
SOON = 'soon'
ON_TIME = 'on-time'

# Color tokens, shared with the progress bar
GREEN = 'green'
GRAY = 'gray'
RED = 'red'
ORANGE = 'orange'
YELLOW = 'yellow'
BLUE = 'blue'


@dataclass(frozen=True)
class Classification:
    state: str
    color: str


def days_until_due(task: Task, today: date) -> Optional[int]:
    if task.due_date is None:
        return None
    return days_between(today, task.due_date)


def classify(task: Task, today: date) -> Classification:
    """
    Urgency label and color for a task, relative to ``today``.

    Kanban cards, list rows, the dashboard and the project overdue counter
    all use this one function, and must pass the same ``today`` the progress
    calculator gets within a render.
    """
    if task.is_done:
        return Classification(DONE, GREEN)

    remaining = days_until_due(task, today)
    if remaining is None:
        return Classification(NO_DATE, GRAY)
    if remaining < 0:
        return Classification(OVERDUE, RED)
    if remaining == 0:
        return Classification(TODAY, ORANGE)
    if remaining <= setting('SOON_THRESHOLD_DAYS'):
        return Classification(SOON, YELLOW)
    return Classification(ON_TIME, BLUE)


def is_overdue(task: Task, today: date) -> bool:
    return not task.is_done and task.due_date is not None and task.due_date < today


def due_label(task: Task, today: date) -> str:
    """Short relative description of the due date ("Tomorrow", "3 days ago")."""
    remaining = days_until_due(task, today)
    if remaining is None:
        return '-'
    if remaining == 0:
        return 'Today'
    if remaining == 1:
        return 'Tomorrow'
    if remaining == -1:
        return 'Yesterday'
    if remaining < 0:
        return f"{abs(remaining)} days ago"
    if remaining < 7:
        return f"In {remaining} days"
    return task.due_date.isoformat()
