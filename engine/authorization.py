"""
Edit authorization for tasks.

One rule decides every mutation: the actor is the task's assignee, or holds
a privileged role. Cost fields (budget, actual cost) are stricter and only
look at the role. Status selectors, subtask checkboxes, upload buttons and
Kanban drag handles should all be driven by the same predicate.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from engine import conf
from engine.records import Actor, Task

# Change kinds
EDIT = 'edit'
COSTS = 'costs'

# Decision reasons
ASSIGNEE = 'assignee'
PRIVILEGED_ROLE = 'privileged_role'
UNAUTHORIZED = 'unauthorized'


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    def __bool__(self):
        return self.allowed


def _roles(roles: Optional[Iterable], default):
    if roles is None:
        return default()
    return conf.role_set(roles)


def is_assignee(task: Task, actor: Actor) -> bool:
    if not actor.display_name or not task.assignee:
        return False
    return actor.display_name == task.assignee


def authorize(task: Task, actor: Actor, kind: str = EDIT,
              privileged_roles: Optional[Iterable] = None,
              cost_roles: Optional[Iterable] = None) -> Decision:
    """
    Decide whether ``actor`` may apply a change of ``kind`` to ``task``.

    Args:
        task: The task being changed
        actor: The acting user
        kind: EDIT for status/subtask/file changes, COSTS for budget and
            actual cost
        privileged_roles: Overrides the configured privileged roles
        cost_roles: Overrides the configured cost editor roles

    Returns:
        Decision with the reason it was granted or refused
    """
    if kind == COSTS:
        allowed_roles = _roles(cost_roles, conf.cost_editor_roles)
        if actor.role in allowed_roles:
            return Decision(True, PRIVILEGED_ROLE)
        return Decision(False, UNAUTHORIZED)

    if is_assignee(task, actor):
        return Decision(True, ASSIGNEE)
    if actor.role in _roles(privileged_roles, conf.privileged_roles):
        return Decision(True, PRIVILEGED_ROLE)
    return Decision(False, UNAUTHORIZED)


def can_edit(task: Task, actor: Actor, privileged_roles: Optional[Iterable] = None) -> bool:
    return authorize(task, actor, EDIT, privileged_roles=privileged_roles).allowed


def can_edit_costs(task: Task, actor: Actor, cost_roles: Optional[Iterable] = None) -> bool:
    return authorize(task, actor, COSTS, cost_roles=cost_roles).allowed


def is_privileged(actor: Actor) -> bool:
    return actor.role in conf.privileged_roles()
