import pytest

from engine import authorize, can_edit, can_edit_costs
from engine.authorization import ASSIGNEE, COSTS, PRIVILEGED_ROLE, UNAUTHORIZED
from engine.exceptions import ConfigurationError
from engine.records import Actor, Role


def test_assignee_may_edit_own_task(make_record, member):
    decision = authorize(make_record(assignee='Ana Member'), member)
    assert decision.allowed
    assert decision.reason == ASSIGNEE


def test_member_may_not_edit_someone_elses_task(make_record, member):
    decision = authorize(make_record(assignee='Someone Else'), member)
    assert not decision
    assert decision.reason == UNAUTHORIZED


@pytest.mark.parametrize('role', ['director', 'admin', 'manager'])
def test_privileged_roles_may_edit_any_task(make_record, role):
    actor = Actor.from_raw('Boss', role)
    decision = authorize(make_record(assignee='Someone Else'), actor)
    assert decision.allowed
    assert decision.reason == PRIVILEGED_ROLE


def test_legacy_role_names_are_aliases():
    assert Actor.from_raw('X', 'gerente').role == Role.MANAGER
    assert Actor.from_raw('X', 'miembro').role == Role.MEMBER
    assert Actor.from_raw('X', 'intern').role is None


def test_unassigned_task_does_not_match_anonymous_actor(make_record):
    assert not can_edit(make_record(assignee=None), Actor(display_name=''))
    assert not can_edit(make_record(assignee=''), Actor(display_name=''))


def test_costs_ignore_assignment(make_record, member, manager):
    task = make_record(assignee='Ana Member')
    assert can_edit(task, member)
    assert not can_edit_costs(task, member)
    assert can_edit_costs(task, manager)
    assert authorize(task, member, COSTS).reason == UNAUTHORIZED


def test_cost_roles_can_be_narrowed(make_record, manager, director):
    task = make_record()
    assert not can_edit_costs(task, manager, cost_roles=['director'])
    assert can_edit_costs(task, director, cost_roles=['director'])


def test_privileged_roles_come_from_settings(settings, make_record, manager, director):
    settings.TASKFLOW_ENGINE = {'PRIVILEGED_ROLES': ['director']}
    task = make_record(assignee='Someone Else')
    assert not can_edit(task, manager)
    assert can_edit(task, director)
    # cost editors default to the privileged roles
    assert not can_edit_costs(task, manager)


def test_unknown_configured_role_is_an_error(settings, make_record, manager):
    settings.TASKFLOW_ENGINE = {'PRIVILEGED_ROLES': ['overlord']}
    with pytest.raises(ConfigurationError):
        can_edit(make_record(assignee='Someone Else'), manager)
