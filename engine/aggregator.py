"""
Project and portfolio statistics.

``aggregate`` is a deterministic function of the task collection and the
current date: it performs no I/O, and two calls on the same input return
equal results. Tasks are grouped by their stable project key, never by the
display name alone.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from engine.classifier import is_overdue
from engine.conf import setting
from engine.dates import add_days, week_start
from engine.records import Priority, Task, TaskStatus

ZERO = Decimal('0')

UNDER_BUDGET = 'under_budget'
AT_RISK = 'at_risk'
OVER_BUDGET = 'over_budget'

GROWING = 'growing'
DECLINING = 'declining'
STEADY = 'steady'


@dataclass(frozen=True)
class BudgetSlice:
    name: str
    value: Decimal
    percentage: float


@dataclass(frozen=True)
class Counts:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    overdue: int = 0

    @property
    def completion_pct(self) -> float:
        if self.total == 0:
            return 0.0
        return self.completed / self.total * 100


@dataclass(frozen=True)
class ProjectStats:
    project_id: str
    name: str
    client: Optional[str]
    counts: Counts
    budget: Decimal
    actual_cost: Decimal
    next_deadline: Optional[date]
    start_date: Optional[date]
    end_date: Optional[date]
    upcoming_deadlines: Tuple[Task, ...] = ()

    @property
    def total(self) -> int:
        return self.counts.total

    @property
    def completion_pct(self) -> float:
        return self.counts.completion_pct

    @property
    def variance(self) -> Decimal:
        return self.budget - self.actual_cost

    @property
    def budget_usage_pct(self) -> float:
        return percentage(self.actual_cost, self.budget)

    @property
    def variance_pct(self) -> float:
        return percentage(self.variance, self.budget)

    @property
    def budget_health(self) -> str:
        return budget_health(self.variance_pct)

    @property
    def budget_breakdown(self) -> Tuple[BudgetSlice, BudgetSlice]:
        return budget_breakdown(self.budget, self.actual_cost)


@dataclass(frozen=True)
class PortfolioStats:
    counts: Counts
    budget: Decimal
    actual_cost: Decimal
    project_count: int
    top_assignees: Tuple[Tuple[str, int], ...]
    monthly_completions: Tuple[int, ...]
    status_distribution: Dict[str, int] = field(default_factory=dict)
    priority_distribution: Dict[str, int] = field(default_factory=dict)
    due_soon: Tuple[Task, ...] = ()

    @property
    def total(self) -> int:
        return self.counts.total

    @property
    def completion_pct(self) -> float:
        return self.counts.completion_pct

    @property
    def variance(self) -> Decimal:
        return self.budget - self.actual_cost

    @property
    def budget_usage_pct(self) -> float:
        return percentage(self.actual_cost, self.budget)

    @property
    def variance_pct(self) -> float:
        return percentage(self.variance, self.budget)


@dataclass(frozen=True)
class Aggregate:
    per_project: Dict[str, ProjectStats]
    portfolio: PortfolioStats


def percentage(part: Decimal, whole: Decimal) -> float:
    if not whole:
        return 0.0
    return float(part / whole * 100)


def budget_health(variance_pct: float) -> str:
    if variance_pct > 10:
        return UNDER_BUDGET
    if variance_pct > -10:
        return AT_RISK
    return OVER_BUDGET


def budget_breakdown(budget: Decimal, actual_cost: Decimal) -> Tuple[BudgetSlice, BudgetSlice]:
    """
    Two slices for a budget pie chart.

    Within budget the slices are spent/remaining as shares of the budget.
    Over budget they become original/overrun as shares of the actual cost.
    """
    remaining = budget - actual_cost
    if remaining < 0:
        overrun = abs(remaining)
        return (
            BudgetSlice('original', budget, percentage(budget, actual_cost)),
            BudgetSlice('overrun', overrun, percentage(overrun, actual_cost)),
        )
    return (
        BudgetSlice('spent', actual_cost, percentage(actual_cost, budget)),
        BudgetSlice('remaining', remaining, percentage(remaining, budget)),
    )


def count_tasks(tasks: Iterable[Task], today: date) -> Counts:
    total = completed = in_progress = pending = overdue = 0
    for task in tasks:
        total += 1
        if task.status == TaskStatus.DONE:
            completed += 1
        elif task.status == TaskStatus.IN_PROGRESS:
            in_progress += 1
        else:
            pending += 1
        if is_overdue(task, today):
            overdue += 1
    return Counts(total, completed, in_progress, pending, overdue)


def _money(values: Iterable[Optional[Decimal]]) -> Decimal:
    return sum((Decimal(v) for v in values if v is not None), ZERO)


def _open_by_due_date(tasks: Sequence[Task]) -> List[Task]:
    # sorted() is stable, ties keep collection order
    return sorted(
        (t for t in tasks if t.due_date is not None and not t.is_done),
        key=lambda t: t.due_date,
    )


def project_stats(project_id: str, tasks: Sequence[Task], today: date, name: Optional[str] = None) -> ProjectStats:
    open_tasks = _open_by_due_date(tasks)
    starts = [t.start_date for t in tasks if t.start_date is not None]
    dues = [t.due_date for t in tasks if t.due_date is not None]
    client = next((t.client for t in tasks if t.client), None)
    if name is None:
        name = next((t.project for t in tasks if t.project), project_id)

    return ProjectStats(
        project_id=project_id,
        name=name,
        client=client,
        counts=count_tasks(tasks, today),
        budget=_money(t.budget for t in tasks),
        actual_cost=_money(t.actual_cost for t in tasks),
        next_deadline=open_tasks[0].due_date if open_tasks else None,
        start_date=min(starts) if starts else None,
        end_date=max(dues) if dues else None,
        upcoming_deadlines=tuple(open_tasks[:3]),
    )


def top_assignees(tasks: Iterable[Task], limit: Optional[int] = None) -> Tuple[Tuple[str, int], ...]:
    """Assignees with the most tasks; ties keep first-encountered order."""
    if limit is None:
        limit = setting('TOP_ASSIGNEES')
    counts: Dict[str, int] = OrderedDict()
    for task in tasks:
        if not task.assignee:
            continue
        counts[task.assignee] = counts.get(task.assignee, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return tuple(ranked[:limit])


def monthly_completions(tasks: Iterable[Task], year: int) -> Tuple[int, ...]:
    """
    Done tasks per month of ``year``, bucketed by due date.

    Done tasks without a due date, or due in another year, are left out.
    """
    buckets = [0] * 12
    for task in tasks:
        if task.is_done and task.due_date is not None and task.due_date.year == year:
            buckets[task.due_date.month - 1] += 1
    return tuple(buckets)


def status_distribution(tasks: Iterable[Task], today: date) -> Dict[str, int]:
    """Task count per display status, where open tasks past due show as overdue."""
    distribution = {s.value: 0 for s in TaskStatus}
    distribution['overdue'] = 0
    for task in tasks:
        key = 'overdue' if is_overdue(task, today) else task.status.value
        distribution[key] += 1
    return distribution


def priority_distribution(tasks: Iterable[Task]) -> Dict[str, int]:
    distribution = {p.value: 0 for p in Priority}
    distribution['none'] = 0
    for task in tasks:
        distribution[task.priority.value if task.priority else 'none'] += 1
    return distribution


def due_soon(tasks: Sequence[Task], today: date, days: Optional[int] = None) -> Tuple[Task, ...]:
    if days is None:
        days = setting('UPCOMING_WINDOW_DAYS')
    horizon = add_days(today, days)
    return tuple(t for t in _open_by_due_date(tasks) if today <= t.due_date <= horizon)


def group_by_project(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    groups: Dict[str, List[Task]] = OrderedDict()
    for task in tasks:
        groups.setdefault(task.project_key, []).append(task)
    return groups


def aggregate(tasks: Iterable[Task], today: date) -> Aggregate:
    tasks = list(tasks)
    groups = group_by_project(tasks)
    per_project = OrderedDict(
        (key, project_stats(key, members, today)) for key, members in groups.items()
    )
    portfolio = PortfolioStats(
        counts=count_tasks(tasks, today),
        budget=_money(t.budget for t in tasks),
        actual_cost=_money(t.actual_cost for t in tasks),
        project_count=len(groups),
        top_assignees=top_assignees(tasks),
        monthly_completions=monthly_completions(tasks, today.year),
        status_distribution=status_distribution(tasks, today),
        priority_distribution=priority_distribution(tasks),
        due_soon=due_soon(tasks, today),
    )
    return Aggregate(per_project=per_project, portfolio=portfolio)


def calculate_trend(current, previous, inverse: bool = False) -> Dict[str, object]:
    """
    Percentage change and trend direction between two periods.

    Args:
        current: Current period value
        previous: Previous period value
        inverse: If True, declining values are considered positive (for overdue items)

    Returns:
        dict with percentage and trend (growing/declining/steady)
    """
    if previous == 0:
        if current == 0:
            percentage_change = 0
            trend = STEADY
        else:
            percentage_change = 100
            trend = DECLINING if inverse else GROWING
    else:
        percentage_change = round(((current - previous) / previous) * 100, 2)

        if percentage_change > 5:
            trend = DECLINING if inverse else GROWING
        elif percentage_change < -5:
            trend = GROWING if inverse else DECLINING
        else:
            trend = STEADY

    return {
        'percentage': abs(percentage_change),
        'trend': trend,
    }


def overdue_trend(tasks: Iterable[Task], today: date) -> Dict[str, object]:
    """Open overdue tasks now against those already overdue at the start of the week."""
    tasks = list(tasks)
    monday = week_start(today)
    current = sum(1 for t in tasks if is_overdue(t, today))
    previous = sum(1 for t in tasks if is_overdue(t, monday))
    trend = calculate_trend(current, previous, inverse=True)
    return {
        'count': current,
        'comparison': {
            'previous_period': previous,
            'difference': current - previous,
            'percentage': trend['percentage'],
            'trend': trend['trend'],
        },
    }
