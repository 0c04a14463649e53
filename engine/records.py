from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class TaskStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    DONE = 'done'


class Priority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class Role(str, Enum):
    ADMIN = 'admin'
    MANAGER = 'manager'
    MEMBER = 'member'
    DIRECTOR = 'director'

    @classmethod
    def normalize(cls, value) -> Optional['Role']:
        """
        Map a stored role string onto a Role.

        Spanish role names written by older clients ('gerente', 'miembro')
        are accepted as aliases. Unknown values map to None.
        """
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        key = ROLE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


ROLE_ALIASES = {
    'gerente': 'manager',
    'miembro': 'member',
}


@dataclass(frozen=True)
class FileRef:
    name: str
    location: str
    uploaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class SubTask:
    id: str
    description: str = ''
    completed: bool = False
    files: Tuple[FileRef, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'files', tuple(self.files))


@dataclass(frozen=True)
class Task:
    """
    A unit of work as seen by the engine.

    Only ``id``, ``title`` and ``status`` are required. ``project_id`` is the
    grouping key for statistics; ``project`` is its display name. Progress is
    never stored here, it is always derived from the record.
    """
    id: str
    title: str
    status: TaskStatus = TaskStatus.PENDING
    description: str = ''
    assignee: Optional[str] = None
    assignee_avatar: Optional[str] = None
    due_date: Optional[date] = None
    start_date: Optional[date] = None
    project_id: Optional[str] = None
    project: str = ''
    client: Optional[str] = None
    budget: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    priority: Optional[Priority] = None
    subtasks: Tuple[SubTask, ...] = field(default_factory=tuple)
    version: int = 0

    def __post_init__(self):
        # Accept raw strings/numbers from adapters and tests alike
        object.__setattr__(self, 'status', TaskStatus(self.status))
        if self.priority is not None and not isinstance(self.priority, Priority):
            object.__setattr__(self, 'priority', Priority(self.priority))
        for name in ('budget', 'actual_cost'):
            value = getattr(self, name)
            if value is not None and not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))
        object.__setattr__(self, 'subtasks', tuple(self.subtasks))

    @property
    def project_key(self) -> str:
        # Tasks without a stable project id fall back to the display name
        if self.project_id is not None:
            return str(self.project_id)
        return self.project

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    def subtask(self, subtask_id) -> Optional[SubTask]:
        for sub in self.subtasks:
            if str(sub.id) == str(subtask_id):
                return sub
        return None

    def with_subtask(self, updated: SubTask) -> 'Task':
        subtasks = tuple(updated if str(s.id) == str(updated.id) else s for s in self.subtasks)
        return replace(self, subtasks=subtasks)


@dataclass(frozen=True)
class Actor:
    """The user attempting a change: display name plus role."""
    display_name: str
    role: Optional[Role] = None

    @classmethod
    def from_raw(cls, display_name, role) -> 'Actor':
        return cls(display_name=display_name or '', role=Role.normalize(role))
