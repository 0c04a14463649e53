"""
Applying authorized changes to task records.

``apply_change`` is the only place a task mutation is decided. It returns
either ``Applied`` (the updated record plus a ``MutationIntent`` the
repository should execute) or ``Rejected`` with a reason. It never stores
anything and never caches progress: progress is derived from the updated
record the next time it is read.

Any status may follow any other; pending -> done and done -> pending are
both legal once authorized.
"""
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from engine import authorization
from engine.records import Actor, FileRef, Task, TaskStatus

logger = logging.getLogger(__name__)

# Rejection reasons
UNAUTHORIZED = authorization.UNAUTHORIZED
NO_OP = 'no_op'
CONFLICT = 'conflict'
UNKNOWN_SUBTASK = 'unknown_subtask'
INVALID_STATUS = 'invalid_status'
INVALID_AMOUNT = 'invalid_amount'
UNSUPPORTED = 'unsupported_change'

# Intent kinds, one per repository operation
SET_STATUS = 'set_status'
TOGGLE_SUBTASK = 'toggle_subtask'
ATTACH_FILE = 'attach_file'
SET_ACTUAL_COST = 'set_actual_cost'
SET_BUDGET = 'set_budget'


@dataclass(frozen=True)
class SetStatus:
    status: Any
    expected_version: Optional[int] = None


@dataclass(frozen=True)
class ToggleSubtask:
    subtask_id: str
    completed: bool
    expected_version: Optional[int] = None


@dataclass(frozen=True)
class AttachFile:
    subtask_id: str
    file: FileRef
    expected_version: Optional[int] = None


@dataclass(frozen=True)
class SetActualCost:
    amount: Any
    expected_version: Optional[int] = None


@dataclass(frozen=True)
class SetBudget:
    amount: Any
    expected_version: Optional[int] = None


Change = Union[SetStatus, ToggleSubtask, AttachFile, SetActualCost, SetBudget]

COST_CHANGES = (SetActualCost, SetBudget)


@dataclass(frozen=True)
class MutationIntent:
    kind: str
    task_id: str
    payload: Dict[str, Any] = field(default_factory=dict)
    expected_version: Optional[int] = None


@dataclass(frozen=True)
class Applied:
    task: Task
    intent: MutationIntent
    ok = True


@dataclass(frozen=True)
class Rejected:
    reason: str
    detail: str = ''
    ok = False


Result = Union[Applied, Rejected]


def _reject(task: Task, actor: Actor, reason: str, detail: str = '') -> Rejected:
    logger.info(f"Rejected change on task {task.id} by {actor.display_name!r}: {reason} {detail}".rstrip())
    return Rejected(reason, detail)


def _parse_status(value) -> Optional[TaskStatus]:
    try:
        return TaskStatus(value)
    except ValueError:
        return None


def _parse_amount(value) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def apply_change(task: Task, change: Change, actor: Actor) -> Result:
    """
    Validate ``change`` against ``task`` for ``actor`` and apply it.

    Authorization is evaluated first; budget and actual cost changes use the
    stricter cost rule. A change that would not alter the record (same
    status, subtask already in that state, same amount) is rejected as a
    no-op so callers do not issue a pointless write, which also covers a
    Kanban card dropped back onto its own column.
    """
    kind = authorization.COSTS if isinstance(change, COST_CHANGES) else authorization.EDIT
    decision = authorization.authorize(task, actor, kind)
    if not decision.allowed:
        return _reject(task, actor, UNAUTHORIZED)

    expected = getattr(change, 'expected_version', None)
    if expected is not None and expected != task.version:
        return _reject(task, actor, CONFLICT, f"expected version {expected}, found {task.version}")

    if isinstance(change, SetStatus):
        return _set_status(task, change, actor)
    if isinstance(change, ToggleSubtask):
        return _toggle_subtask(task, change, actor)
    if isinstance(change, AttachFile):
        return _attach_file(task, change, actor)
    if isinstance(change, SetActualCost):
        return _set_cost(task, change, actor, 'actual_cost', SET_ACTUAL_COST)
    if isinstance(change, SetBudget):
        return _set_cost(task, change, actor, 'budget', SET_BUDGET)
    return _reject(task, actor, UNSUPPORTED, type(change).__name__)


def _set_status(task: Task, change: SetStatus, actor: Actor) -> Result:
    status = _parse_status(change.status)
    if status is None:
        return _reject(task, actor, INVALID_STATUS, repr(change.status))
    if status == task.status:
        return _reject(task, actor, NO_OP)

    updated = replace(task, status=status)
    intent = MutationIntent(SET_STATUS, task.id, {'status': status.value}, change.expected_version)
    return Applied(updated, intent)


def _toggle_subtask(task: Task, change: ToggleSubtask, actor: Actor) -> Result:
    sub = task.subtask(change.subtask_id)
    if sub is None:
        return _reject(task, actor, UNKNOWN_SUBTASK, str(change.subtask_id))
    completed = bool(change.completed)
    if sub.completed == completed:
        return _reject(task, actor, NO_OP)

    updated = task.with_subtask(replace(sub, completed=completed))
    intent = MutationIntent(
        TOGGLE_SUBTASK,
        task.id,
        {'subtask_id': sub.id, 'completed': completed},
        change.expected_version,
    )
    return Applied(updated, intent)


def _attach_file(task: Task, change: AttachFile, actor: Actor) -> Result:
    sub = task.subtask(change.subtask_id)
    if sub is None:
        return _reject(task, actor, UNKNOWN_SUBTASK, str(change.subtask_id))

    updated = task.with_subtask(replace(sub, files=sub.files + (change.file,)))
    intent = MutationIntent(
        ATTACH_FILE,
        task.id,
        {'subtask_id': sub.id, 'file': change.file},
        change.expected_version,
    )
    return Applied(updated, intent)


def _set_cost(task: Task, change, actor: Actor, field_name: str, intent_kind: str) -> Result:
    amount = _parse_amount(change.amount)
    if amount is None:
        return _reject(task, actor, INVALID_AMOUNT, repr(change.amount))
    if getattr(task, field_name) == amount:
        return _reject(task, actor, NO_OP)

    updated = replace(task, **{field_name: amount})
    intent = MutationIntent(intent_kind, task.id, {'amount': amount}, change.expected_version)
    return Applied(updated, intent)
