from datetime import date, timedelta
from decimal import Decimal

from engine import aggregate
from engine.aggregator import (
    AT_RISK,
    DECLINING,
    GROWING,
    OVER_BUDGET,
    STEADY,
    UNDER_BUDGET,
    budget_breakdown,
    calculate_trend,
    monthly_completions,
    overdue_trend,
    top_assignees,
)


def launch_tasks(make_record):
    return [
        make_record(project_id='1', project='Launch', budget=1000, actual_cost=500, status='done'),
        make_record(project_id='1', project='Launch', budget=2000, actual_cost=2500, status='in_progress'),
        make_record(project_id='1', project='Launch', budget=0, actual_cost=0, status='pending'),
    ]


def test_project_budget_totals(make_record, today):
    stats = aggregate(launch_tasks(make_record), today).per_project['1']

    assert stats.name == 'Launch'
    assert stats.budget == Decimal('3000')
    assert stats.actual_cost == Decimal('3000')
    assert stats.variance == Decimal('0')
    assert stats.budget_usage_pct == 100.0
    assert stats.budget_health == AT_RISK


def test_counts_and_completion(make_record, today):
    tasks = launch_tasks(make_record) + [
        make_record(project_id='1', status='pending', due_date=today - timedelta(days=1)),
    ]
    counts = aggregate(tasks, today).per_project['1'].counts

    assert (counts.total, counts.completed, counts.in_progress, counts.pending) == (4, 1, 1, 2)
    assert counts.overdue == 1
    assert counts.completion_pct == 25.0


def test_empty_collection(today):
    result = aggregate([], today)
    assert result.per_project == {}
    assert result.portfolio.total == 0
    assert result.portfolio.completion_pct == 0.0
    assert result.portfolio.budget_usage_pct == 0.0


def test_projects_sharing_a_name_stay_separate(make_record, today):
    tasks = [
        make_record(project_id='1', project='Website'),
        make_record(project_id='2', project='Website'),
    ]
    per_project = aggregate(tasks, today).per_project
    assert list(per_project) == ['1', '2']
    assert all(stats.total == 1 for stats in per_project.values())


def test_per_project_totals_partition_the_portfolio(make_record, today):
    tasks = [
        make_record(project_id=str(i % 3), project=f"P{i % 3}", status=('pending', 'done')[i % 2])
        for i in range(10)
    ]
    result = aggregate(tasks, today)
    assert sum(stats.total for stats in result.per_project.values()) == result.portfolio.total == 10
    assert result.portfolio.project_count == 3


def test_aggregate_is_deterministic(make_record, today):
    tasks = launch_tasks(make_record) + [make_record(project_id='2', assignee='Ana', due_date=today)]
    assert aggregate(tasks, today) == aggregate(tasks, today)


def test_next_deadline_and_upcoming(make_record, today):
    tasks = [
        make_record(project_id='1', due_date=today + timedelta(days=9)),
        make_record(project_id='1', due_date=today + timedelta(days=2)),
        make_record(project_id='1', due_date=today + timedelta(days=1), status='done'),
        make_record(project_id='1', due_date=today + timedelta(days=4)),
        make_record(project_id='1', due_date=today + timedelta(days=3)),
        make_record(project_id='1', start_date=today - timedelta(days=6)),
    ]
    stats = aggregate(tasks, today).per_project['1']

    assert stats.next_deadline == today + timedelta(days=2)
    assert [t.due_date for t in stats.upcoming_deadlines] == [
        today + timedelta(days=2), today + timedelta(days=3), today + timedelta(days=4),
    ]
    assert stats.start_date == today - timedelta(days=6)
    assert stats.end_date == today + timedelta(days=9)


def test_top_assignees_limit_and_ties(make_record):
    names = ['Eve', 'Ann', 'Bob', 'Ann', 'Cid', 'Dan', 'Fay', None, '']
    tasks = [make_record(assignee=name) for name in names]
    ranked = top_assignees(tasks)

    assert ranked[0] == ('Ann', 2)
    assert [name for name, _ in ranked[1:]] == ['Eve', 'Bob', 'Cid', 'Dan']
    assert len(ranked) == 5


def test_monthly_completions_skip_undated_and_other_years(make_record, today):
    tasks = [
        make_record(status='done', due_date=date(2024, 1, 5)),
        make_record(status='done', due_date=date(2024, 1, 20)),
        make_record(status='done', due_date=date(2024, 12, 1)),
        make_record(status='done', due_date=date(2023, 6, 1)),
        make_record(status='done'),
        make_record(status='pending', due_date=date(2024, 2, 1)),
    ]
    buckets = monthly_completions(tasks, 2024)
    assert len(buckets) == 12
    assert buckets[0] == 2
    assert buckets[11] == 1
    assert sum(buckets) == 3
    assert aggregate(tasks, today).portfolio.monthly_completions == buckets


def test_status_and_priority_distribution(make_record, today):
    tasks = [
        make_record(status='pending', due_date=today - timedelta(days=1), priority='high'),
        make_record(status='in_progress', priority='low'),
        make_record(status='done', due_date=today - timedelta(days=1)),
    ]
    portfolio = aggregate(tasks, today).portfolio
    assert portfolio.status_distribution == {'pending': 0, 'in_progress': 1, 'done': 1, 'overdue': 1}
    assert portfolio.priority_distribution == {'low': 1, 'medium': 0, 'high': 1, 'none': 1}


def test_due_soon_window(make_record, today):
    tasks = [
        make_record(due_date=today),
        make_record(due_date=today + timedelta(days=7)),
        make_record(due_date=today + timedelta(days=8)),
        make_record(due_date=today - timedelta(days=1)),
    ]
    assert [t.due_date for t in aggregate(tasks, today).portfolio.due_soon] == [
        today, today + timedelta(days=7),
    ]


def test_budget_health_thresholds(make_record, today):
    under = aggregate([make_record(project_id='1', budget=100, actual_cost=50)], today).per_project['1']
    over = aggregate([make_record(project_id='1', budget=100, actual_cost=150)], today).per_project['1']
    assert under.budget_health == UNDER_BUDGET
    assert over.budget_health == OVER_BUDGET
    assert over.variance_pct == -50.0


def test_budget_breakdown_slices():
    spent, remaining = budget_breakdown(Decimal('200'), Decimal('50'))
    assert (spent.name, spent.percentage) == ('spent', 25.0)
    assert (remaining.name, remaining.value) == ('remaining', Decimal('150'))

    original, overrun = budget_breakdown(Decimal('100'), Decimal('125'))
    assert (original.name, original.percentage) == ('original', 80.0)
    assert (overrun.name, overrun.value, overrun.percentage) == ('overrun', Decimal('25'), 20.0)


def test_calculate_trend():
    assert calculate_trend(0, 0) == {'percentage': 0, 'trend': STEADY}
    assert calculate_trend(5, 0) == {'percentage': 100, 'trend': GROWING}
    assert calculate_trend(5, 0, inverse=True)['trend'] == DECLINING
    assert calculate_trend(12, 10) == {'percentage': 20.0, 'trend': GROWING}
    assert calculate_trend(8, 10) == {'percentage': 20.0, 'trend': DECLINING}
    assert calculate_trend(8, 10, inverse=True)['trend'] == GROWING


def test_overdue_trend_compares_with_start_of_week(make_record):
    friday = date(2024, 3, 15)
    tasks = [
        make_record(due_date=date(2024, 3, 1)),
        make_record(due_date=date(2024, 3, 13)),
        make_record(due_date=date(2024, 3, 14)),
        make_record(due_date=date(2024, 3, 1), status='done'),
    ]
    trend = overdue_trend(tasks, friday)
    assert trend['count'] == 3
    assert trend['comparison']['previous_period'] == 1
    assert trend['comparison']['difference'] == 2
