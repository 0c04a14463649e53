from datetime import date

import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from engine.records import Actor, SubTask, Task
from project.models import Project
from task.models import SubTask as SubTaskRow
from task.models import Task as TaskRow
from user.models import UserProfile

TODAY = date(2024, 3, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_record():
    """Build engine Task records with sensible defaults."""
    counter = {'next': 0}

    def _make(**kwargs):
        counter['next'] += 1
        kwargs.setdefault('id', str(counter['next']))
        kwargs.setdefault('title', f"Task {kwargs['id']}")
        kwargs['subtasks'] = tuple(
            sub if isinstance(sub, SubTask) else SubTask(id=str(i + 1), description=f"Step {i + 1}", completed=sub)
            for i, sub in enumerate(kwargs.get('subtasks', ()))
        )
        return Task(**kwargs)

    return _make


@pytest.fixture
def member():
    return Actor.from_raw('Ana Member', 'member')


@pytest.fixture
def manager():
    return Actor.from_raw('Marco Manager', 'manager')


@pytest.fixture
def director():
    return Actor.from_raw('Dora Director', 'director')


@pytest.fixture
def make_user(db):
    def _make(username, role='member', first_name='', last_name=''):
        user = User.objects.create_user(
            username=username, password='secret-pass', first_name=first_name, last_name=last_name
        )
        UserProfile.objects.create(user=user, role=role)
        return user

    return _make


@pytest.fixture
def project(db):
    return Project.objects.create(name='Launch', slack_channel_id='C0LAUNCH')


@pytest.fixture
def make_task_row(db, project):
    def _make(subtasks=(), **kwargs):
        kwargs.setdefault('title', 'Write release notes')
        kwargs.setdefault('project', project)
        task = TaskRow.objects.create(**kwargs)
        for position, completed in enumerate(subtasks):
            SubTaskRow.objects.create(
                task=task, description=f"Step {position + 1}", completed=completed, position=position
            )
        return task

    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _as(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _as
