"""Identity sync: reconcile an externally authenticated principal with a local user.

Profile fields (email, full name, avatar) always follow the identity provider.
``role`` is never written here: new users start as Student and only an Admin
changes roles afterwards.
"""

import logging
from dataclasses import dataclass
from typing import Any

from ClassroomApp.core.choices import UserRole
from ClassroomApp.core.errors import DuplicateRecord, Result, collaborator_boundary, conflict
from ClassroomApp.domain.repositories import Store, get_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityClaims:
    """What the identity collaborator knows about the signed-in principal."""
    external_id: str
    email: str
    display_name: str
    avatar_url: str | None = None


@collaborator_boundary
def reconcile(
    external_id: str,
    email: str,
    full_name: str,
    avatar_url: str | None = None,
    *,
    store: Store | None = None,
) -> Result:
    """Create or refresh the local user for ``external_id`` and return it.

    Rules:
        - Unknown external id and unknown email: create a Student.
        - Unknown external id but the email belongs to a pre-registered user:
          bind that user to the external id.
        - Known external id: overwrite email and full name; keep the previous
          avatar when none is supplied.
    """
    store = store or get_store()
    try:
        user = store.get_user_by_external_id(external_id)
        if user is None:
            existing = store.get_user_by_email(email)
            if existing is None:
                user = store.create_user(
                    external_id=external_id,
                    email=email,
                    full_name=full_name,
                    role=UserRole.STUDENT,
                    avatar_url=avatar_url,
                )
                logger.info("Created user %s for external id %s", user.id, external_id)
                return Result.success(user)
            user = store.update_user(
                existing.id,
                external_id=external_id,
                full_name=full_name,
                avatar_url=avatar_url or existing.avatar_url,
            )
            logger.info("Bound existing user %s (%s) to external id %s", user.id, email, external_id)
            return Result.success(user)

        changes = {
            "email": email,
            "full_name": full_name,
            "avatar_url": avatar_url or user.avatar_url,
        }
        if any(getattr(user, name) != value for name, value in changes.items()):
            user = store.update_user(user.id, **changes)
            logger.info("Updated profile of user %s from identity provider", user.id)
        return Result.success(user)
    except DuplicateRecord:
        logger.warning("Identity sync for %s collided with another account using %s", external_id, email)
        return conflict("Another account already uses this email address")


def sync_claims(claims: IdentityClaims, *, store: Store | None = None) -> Result:
    return reconcile(claims.external_id, claims.email, claims.display_name, claims.avatar_url, store=store)


def claims_from_token(payload: Any, id_claim: str = "sub") -> IdentityClaims | None:
    """Read identity claims from a verified token payload; None if unusable."""
    external_id = payload.get(id_claim)
    email = payload.get("email")
    if not external_id or not email:
        return None
    metadata = payload.get("user_metadata") or {}
    display_name = metadata.get("full_name") or metadata.get("name") or "User"
    return IdentityClaims(
        external_id=str(external_id),
        email=email,
        display_name=display_name,
        avatar_url=metadata.get("avatar_url"),
    )
