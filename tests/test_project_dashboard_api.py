from datetime import date
from decimal import Decimal

import pytest

from project.models import Project

pytestmark = pytest.mark.django_db

AS_OF = {'as_of': '2024-03-15'}


@pytest.fixture
def viewer(make_user):
    return make_user('viewer', role='member', first_name='Vera', last_name='Viewer')


@pytest.fixture
def launch(make_task_row, viewer):
    make_task_row(title='Design', budget=Decimal('1000'), actual_cost=Decimal('500'), status='done',
                  start_date=date(2024, 3, 1), due_date=date(2024, 3, 10), assignee=viewer)
    make_task_row(title='Build', budget=Decimal('2000'), actual_cost=Decimal('2500'), status='in_progress',
                  start_date=date(2024, 3, 5), due_date=date(2024, 3, 14), assignee=viewer)
    make_task_row(title='Ship', budget=Decimal('0'), actual_cost=Decimal('0'),
                  due_date=date(2024, 3, 20), subtasks=[False, False])
    make_task_row(title='Retired', is_active=False)


def test_project_stats(client_for, viewer, project, launch):
    response = client_for(viewer).get(f'/api/v1/projects/{project.pk}/stats/', AS_OF)

    assert response.status_code == 200
    data = response.data
    assert data['name'] == 'Launch'
    assert data['counts']['total'] == 3
    assert data['counts']['overdue'] == 1
    assert data['budget'] == '3000.00'
    assert data['actual_cost'] == '3000.00'
    assert data['variance'] == '0.00'
    assert data['budget_health'] == 'at_risk'
    assert data['next_deadline'] == '2024-03-14'
    assert [t['title'] for t in data['upcoming_deadlines']] == ['Build', 'Ship']


def test_project_without_tasks_has_empty_stats(client_for, viewer):
    empty = Project.objects.create(name='Empty')
    data = client_for(viewer).get(f'/api/v1/projects/{empty.pk}/stats/', AS_OF).data
    assert data['name'] == 'Empty'
    assert data['counts']['total'] == 0
    assert data['counts']['completion_pct'] == 0.0


def test_project_list_summaries(client_for, viewer, project, launch):
    Project.objects.create(name='Empty')
    response = client_for(viewer).get('/api/v1/projects/', AS_OF)

    assert response.status_code == 200
    summaries = {row['name']: row['summary'] for row in response.data['results']}
    assert summaries['Launch']['total'] == 3
    assert summaries['Launch']['completed'] == 1
    assert summaries['Empty']['total'] == 0


def test_project_timeline(client_for, viewer, project, launch):
    data = client_for(viewer).get(f'/api/v1/projects/{project.pk}/timeline/', AS_OF).data

    assert data['window_start'] == '2024-03-01'
    assert data['window_end'] == '2024-03-20'
    assert data['total_days'] == 19
    assert len(data['columns']) == 20
    assert [bar['title'] for bar in data['bars']] == ['Design', 'Build', 'Ship']
    assert len(data['subtask_bars']) == 2
    assert data['bars'][1]['left'] == pytest.approx(4 * data['day_width'])


def test_dashboard_summary(client_for, viewer, launch):
    other = Project.objects.create(name='Other')
    from task.models import Task

    Task.objects.create(title='Audit', project=other, due_date=date(2024, 3, 16))

    response = client_for(viewer).get('/api/v1/dashboard/summary/', AS_OF)

    assert response.status_code == 200
    portfolio = response.data['portfolio']
    assert portfolio['counts']['total'] == 4
    assert portfolio['project_count'] == 2
    assert sum(p['counts']['total'] for p in response.data['projects']) == 4
    assert portfolio['top_assignees'] == [{'assignee': 'Vera Viewer', 'count': 2}]
    assert portfolio['status_distribution']['overdue'] == 1
    assert [t['title'] for t in portfolio['due_soon']] == ['Audit', 'Ship']
    assert response.data['overdue_trend']['count'] == 1


def test_dashboard_timeline_filters_by_project(client_for, viewer, project, launch):
    other = Project.objects.create(name='Other')
    data = client_for(viewer).get('/api/v1/dashboard/timeline/', {'project': other.pk, **AS_OF}).data
    assert data['bars'] == []
    assert data['total_days'] == 30

    response = client_for(viewer).get('/api/v1/dashboard/timeline/', {'project': 'launch'})
    assert response.status_code == 400


def test_distributions_skip_completed_projects(client_for, viewer, launch):
    done = Project.objects.create(name='Finished', status='completed')
    from task.models import Task

    Task.objects.create(title='Old', project=done, priority='high')

    client = client_for(viewer)
    statuses = client.get('/api/v1/dashboard/task-status-distribution/', AS_OF).data['status_distribution']
    priorities = client.get('/api/v1/dashboard/task-priority-distribution/').data['priority_distribution']

    assert {row['display_status']: row['count'] for row in statuses} == {
        'pending': 1, 'in_progress': 0, 'done': 1, 'overdue': 1,
    }
    assert {row['priority']: row['count'] for row in priorities}['high'] == 0


def test_due_tasks(client_for, viewer, launch):
    data = client_for(viewer).get('/api/v1/dashboard/due-tasks/', AS_OF).data
    assert [t['title'] for t in data['due_tasks']] == ['Build']


def test_project_detail_summary(client_for, viewer, project, launch):
    data = client_for(viewer).get(f'/api/v1/projects/{project.pk}/', AS_OF).data
    assert data['summary']['total'] == 3
    assert data['summary']['overdue'] == 1
    assert data['summary']['next_deadline'] == '2024-03-14'
