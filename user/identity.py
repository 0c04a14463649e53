"""
Who is acting: maps an authenticated Django user onto an engine Actor.
"""
from typing import Optional

from django.core.exceptions import ObjectDoesNotExist

from engine.records import Actor


def display_name(user) -> str:
    """Name shown on task cards; also the value tasks are assigned by."""
    if user is None:
        return ''
    return user.get_full_name() or user.username


def profile_for(user):
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    # Reverse one-to-one raises when the profile row does not exist
    try:
        return user.profile
    except ObjectDoesNotExist:
        return None


def role_for(user) -> Optional[str]:
    profile = profile_for(user)
    return profile.role if profile else None


def avatar_for(user) -> Optional[str]:
    profile = profile_for(user)
    return profile.avatar_url if profile else None


def actor_for_user(user) -> Actor:
    if user is None or not getattr(user, 'is_authenticated', False):
        return Actor(display_name='')
    return Actor.from_raw(display_name(user), role_for(user))
