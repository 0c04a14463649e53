"""
Engine configuration.

Values come from the ``TASKFLOW_ENGINE`` dict in Django settings when Django
is configured, falling back to the defaults below. Example::

    TASKFLOW_ENGINE = {
        'PRIVILEGED_ROLES': ['director', 'admin', 'manager'],
        'COST_EDITOR_ROLES': ['director'],
        'TIMELINE_CANVAS_WIDTH': 800,
    }
"""
from typing import Any, Dict, FrozenSet, Iterable

from engine.exceptions import ConfigurationError
from engine.records import Role

DEFAULTS: Dict[str, Any] = {
    'PRIVILEGED_ROLES': ('director', 'admin', 'manager'),
    # None means "same as PRIVILEGED_ROLES"
    'COST_EDITOR_ROLES': None,
    'PROGRESS_NO_DUE_DATE': 50.0,
    'PROGRESS_FLOOR': 10.0,
    'PROGRESS_CEILING': 90.0,
    'SOON_THRESHOLD_DAYS': 3,
    'UPCOMING_WINDOW_DAYS': 7,
    'TOP_ASSIGNEES': 5,
    'TIMELINE_CANVAS_WIDTH': 800,
    'TIMELINE_MIN_DAY_WIDTH': 20,
    'TIMELINE_DEFAULT_SPAN_DAYS': 30,
    'TIMELINE_DEFAULT_TASK_DAYS': 7,
    'TIMELINE_MIN_MARKER_WIDTH': 40,
}


def _user_settings() -> Dict[str, Any]:
    from django.conf import settings

    if not settings.configured:
        return {}
    return dict(getattr(settings, 'TASKFLOW_ENGINE', {}) or {})


def engine_settings() -> Dict[str, Any]:
    merged = dict(DEFAULTS)
    merged.update(_user_settings())
    return merged


def setting(name: str) -> Any:
    return engine_settings()[name]


def role_set(values: Iterable) -> FrozenSet[Role]:
    roles = set()
    for value in values:
        role = Role.normalize(value)
        if role is None:
            raise ConfigurationError(f"Unknown role in engine configuration: {value!r}")
        roles.add(role)
    return frozenset(roles)


def privileged_roles() -> FrozenSet[Role]:
    return role_set(setting('PRIVILEGED_ROLES'))


def cost_editor_roles() -> FrozenSet[Role]:
    configured = setting('COST_EDITOR_ROLES')
    if configured is None:
        return privileged_roles()
    return role_set(configured)
