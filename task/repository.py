"""
Task repository: the storage side of the engine.

Loads the active task set as engine records and executes the mutation
intents produced by ``engine.transitions.apply_change``. Each intent is one
unit of work; there is no batching. Storage failures surface as
``RepositoryError`` and are never retried here.
"""
import logging
from contextlib import contextmanager
from typing import List, Optional

from django.db import DatabaseError, transaction
from django.db.models import F, Prefetch
from django.utils import timezone

from engine import records
from engine import transitions
from user.identity import avatar_for, display_name
from .models import SubTask, SubTaskFile, Task

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Storage failed; the caller decides whether to retry."""


class TaskNotFound(RepositoryError):
    pass


class SubTaskNotFound(RepositoryError):
    pass


class StaleTaskError(RepositoryError):
    """The task changed since the caller read it (version mismatch)."""


@contextmanager
def storage_errors(operation: str):
    try:
        yield
    except DatabaseError as e:
        logger.error(f"Task storage failed during {operation}: {str(e)}")
        raise RepositoryError(f"Storage error during {operation}") from e


def _pk(value, error=None):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise (error or TaskNotFound)(f"Invalid id {value!r}")


def to_record(task: Task) -> records.Task:
    """Convert a Task row (with prefetched subtasks and files) to an engine record."""
    subtasks = tuple(
        records.SubTask(
            id=str(sub.pk),
            description=sub.description,
            completed=sub.completed,
            files=tuple(
                records.FileRef(name=f.name, location=f.location, uploaded_at=f.uploaded_at)
                for f in sub.files.all()
            ),
        )
        for sub in task.subtasks.all()
    )
    return records.Task(
        id=str(task.pk),
        title=task.title,
        description=task.description,
        status=task.status,
        assignee=display_name(task.assignee) if task.assignee_id else None,
        assignee_avatar=avatar_for(task.assignee) if task.assignee_id else None,
        due_date=task.due_date,
        start_date=task.start_date,
        project_id=str(task.project_id),
        project=task.project.name,
        client=task.client,
        budget=task.budget,
        actual_cost=task.actual_cost,
        priority=task.priority or None,
        subtasks=subtasks,
        version=task.version,
    )


class TaskRepository:

    def queryset(self):
        return (
            Task.active
            .select_related('project', 'assignee', 'assignee__profile')
            .prefetch_related(
                Prefetch('subtasks', queryset=SubTask.objects.prefetch_related('files'))
            )
            .order_by('id')
        )

    def to_records(self, tasks) -> List[records.Task]:
        with storage_errors('load'):
            return [to_record(task) for task in tasks]

    def active_tasks(self, project_id=None) -> List[records.Task]:
        qs = self.queryset()
        if project_id is not None:
            qs = qs.filter(project_id=project_id)
        return self.to_records(qs)

    def get(self, task_id) -> records.Task:
        with storage_errors('get'):
            task = self.queryset().filter(pk=_pk(task_id)).first()
            if task is None:
                raise TaskNotFound(f"Task {task_id} not found")
            return to_record(task)

    def apply(self, intent: transitions.MutationIntent) -> records.Task:
        """
        Execute one mutation intent and return the reloaded task.

        When the intent carries an expected version the write only happens
        if the stored version still matches; otherwise the last write wins.
        """
        handler = {
            transitions.SET_STATUS: self._set_status,
            transitions.TOGGLE_SUBTASK: self._toggle_subtask,
            transitions.ATTACH_FILE: self._attach_file,
            transitions.SET_ACTUAL_COST: self._set_actual_cost,
            transitions.SET_BUDGET: self._set_budget,
        }.get(intent.kind)
        if handler is None:
            raise RepositoryError(f"Unsupported mutation intent: {intent.kind}")

        with storage_errors(intent.kind):
            with transaction.atomic():
                self._bump_version(intent.task_id, intent.expected_version)
                handler(intent)
        logger.info(f"Applied {intent.kind} to task {intent.task_id}")
        return self.get(intent.task_id)

    def deactivate(self, task_id) -> None:
        with storage_errors('deactivate'):
            updated = Task.active.filter(pk=_pk(task_id)).update(
                is_active=False, version=F('version') + 1, updated_at=timezone.now()
            )
        if not updated:
            raise TaskNotFound(f"Task {task_id} not found")
        logger.info(f"Deactivated task {task_id}")

    def _bump_version(self, task_id, expected_version: Optional[int]) -> None:
        qs = Task.active.filter(pk=_pk(task_id))
        if expected_version is not None:
            qs = qs.filter(version=expected_version)
        updated = qs.update(version=F('version') + 1, updated_at=timezone.now())
        if updated:
            return
        if expected_version is not None and Task.active.filter(pk=task_id).exists():
            raise StaleTaskError(f"Task {task_id} changed since version {expected_version}")
        raise TaskNotFound(f"Task {task_id} not found")

    def _set_status(self, intent):
        Task.objects.filter(pk=intent.task_id).update(status=intent.payload['status'])

    def _set_actual_cost(self, intent):
        Task.objects.filter(pk=intent.task_id).update(actual_cost=intent.payload['amount'])

    def _set_budget(self, intent):
        Task.objects.filter(pk=intent.task_id).update(budget=intent.payload['amount'])

    def _subtask(self, intent) -> SubTask:
        sub = SubTask.objects.filter(
            pk=_pk(intent.payload['subtask_id'], SubTaskNotFound), task_id=_pk(intent.task_id)
        ).first()
        if sub is None:
            raise SubTaskNotFound(f"Subtask {intent.payload['subtask_id']} not found")
        return sub

    def _toggle_subtask(self, intent):
        sub = self._subtask(intent)
        sub.completed = intent.payload['completed']
        sub.save(update_fields=['completed'])

    def _attach_file(self, intent):
        sub = self._subtask(intent)
        file_ref = intent.payload['file']
        SubTaskFile.objects.create(
            subtask=sub,
            name=file_ref.name,
            location=file_ref.location,
            uploaded_at=file_ref.uploaded_at or timezone.now(),
        )
