"""Domain service functions for user administration (Admin-only except own profile)."""

import logging
from typing import Any

from django.core.exceptions import ValidationError

from ClassroomApp.core import policy
from ClassroomApp.core.choices import UserRole
from ClassroomApp.core.errors import (
    DuplicateRecord, ErrorCode, Result, collaborator_boundary, conflict, invalid, not_found,
)
from ClassroomApp.core.policy import Action, OwnershipFacts
from ClassroomApp.core.validators import first_message, validate_role
from ClassroomApp.domain.repositories import Store, get_store

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("full_name", "avatar_url")


@collaborator_boundary
def change_role(actor: Any, user_id: Any, role: str, *, store: Store | None = None) -> Result:
    """Set a user's role. Admin only; another Admin's role cannot be changed."""
    store = store or get_store()
    denied = policy.authorize(actor, Action.CHANGE_ROLE)
    if denied:
        return Result.from_error(denied)
    try:
        validate_role(role)
    except ValidationError as exc:
        return invalid(first_message(exc))
    user = store.get_user(user_id)
    if user is None:
        return not_found("User")
    if user.role == role:
        return Result.success(user)
    if policy.is_admin(user) and user.id != actor.id:
        return Result.fail(ErrorCode.PERMISSION_DENIED, "Cannot change the role of another administrator")
    updated = store.update_user(user.id, role=role)
    logger.info("User %s role changed %s -> %s by admin %s", user.id, user.role, role, actor.id)
    return Result.success(updated)


@collaborator_boundary
def create_user(
    actor: Any,
    email: str,
    full_name: str,
    role: str = UserRole.STUDENT,
    avatar_url: str | None = None,
    *,
    store: Store | None = None,
) -> Result:
    """Pre-register a user; identity sync binds the external id on first sign-in."""
    store = store or get_store()
    denied = policy.authorize(actor, Action.MANAGE_USERS)
    if denied:
        return Result.from_error(denied)
    try:
        validate_role(role)
    except ValidationError as exc:
        return invalid(first_message(exc))
    if store.get_user_by_email(email) is not None:
        return conflict("User with this email already exists")
    try:
        user = store.create_user(email=email, full_name=full_name, role=role, avatar_url=avatar_url)
    except DuplicateRecord:
        return conflict("User with this email already exists")
    logger.info("User %s (%s) created by admin %s", user.id, email, actor.id)
    return Result.success(user)


@collaborator_boundary
def update_profile(actor: Any, user_id: Any, changes: dict[str, Any], *, store: Store | None = None) -> Result:
    """Update name/avatar. Roles are never changed here (see ``change_role``)."""
    store = store or get_store()
    user = store.get_user(user_id)
    if user is None:
        return not_found("User")
    denied = policy.authorize(actor, Action.UPDATE_PROFILE, OwnershipFacts(owner_id=user.id))
    if denied:
        return Result.from_error(denied)
    fields = {name: changes[name] for name in PROFILE_FIELDS if name in changes}
    if not fields:
        return Result.success(user)
    return Result.success(store.update_user(user.id, **fields))


@collaborator_boundary
def delete_user(actor: Any, user_id: Any, *, store: Store | None = None) -> Result:
    """Delete a user. A teacher's courses are first transferred to an administrator."""
    store = store or get_store()
    denied = policy.authorize(actor, Action.MANAGE_USERS)
    if denied:
        return Result.from_error(denied)
    user = store.get_user(user_id)
    if user is None:
        return not_found("User")
    if policy.is_admin(user) and user.id != actor.id:
        return Result.fail(ErrorCode.PERMISSION_DENIED, "Cannot delete another administrator")
    heir = None
    if store.count_courses(teacher_id=user.id):
        heir = store.find_admin(exclude_id=user.id)
        if heir is None:
            return conflict("No administrator available to take over this user's courses")
    with store.atomic():
        if heir is not None:
            moved = store.reassign_courses(user.id, heir.id)
            logger.info("Transferred %s courses from user %s to admin %s", moved, user.id, heir.id)
        store.delete_user(user.id)
    logger.info("User %s deleted by admin %s", user.id, actor.id)
    return Result.success(None)


@collaborator_boundary
def list_users(actor: Any, role: str | None = None, *, store: Store | None = None) -> Result:
    store = store or get_store()
    denied = policy.authorize(actor, Action.MANAGE_USERS)
    if denied:
        return Result.from_error(denied)
    return Result.success(store.list_users(role))


@collaborator_boundary
def get_user(actor: Any, user_id: Any, *, store: Store | None = None) -> Result:
    store = store or get_store()
    denied = policy.authorize(actor, Action.VIEW_STUDENT_RECORDS, OwnershipFacts(owner_id=user_id))
    if denied:
        return Result.from_error(denied)
    user = store.get_user(user_id)
    if user is None:
        return not_found("User")
    return Result.success(user)
