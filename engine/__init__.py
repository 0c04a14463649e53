"""
Task lifecycle, progress and scheduling engine.

Pure computation over task records: progress percentages, urgency
classification, edit authorization, project/portfolio statistics and
Gantt timeline geometry. Nothing in here touches the database or the
request cycle; callers pass the current date explicitly.
"""

from engine.records import (
    Actor,
    FileRef,
    Priority,
    Role,
    SubTask,
    Task,
    TaskStatus,
)
from engine.progress import progress, progress_color
from engine.classifier import classify, is_overdue
from engine.authorization import authorize, can_edit, can_edit_costs
from engine.transitions import apply_change
from engine.aggregator import aggregate
from engine.timeline import layout

__all__ = [
    'Actor',
    'FileRef',
    'Priority',
    'Role',
    'SubTask',
    'Task',
    'TaskStatus',
    'progress',
    'progress_color',
    'classify',
    'is_overdue',
    'authorize',
    'can_edit',
    'can_edit_costs',
    'apply_change',
    'aggregate',
    'layout',
]
