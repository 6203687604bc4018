from __future__ import annotations

import logging
from dataclasses import dataclass

from allauth.account.models import EmailAddress
from django.conf import settings

from .models import MemberProfile


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberIdentity:
    user: object
    email: str
    display_name: str


def member_identity(user) -> MemberIdentity:
    """
    The (subject, email, display name) triple a booking snapshots.
    Display name falls back to the email, then to "User".
    """
    email = (getattr(user, "email", "") or "").strip()
    full_name = ""
    if hasattr(user, "get_full_name"):
        full_name = (user.get_full_name() or "").strip()
    return MemberIdentity(user=user, email=email, display_name=full_name or email or "User")


def verified_emails(user) -> set[str]:
    """Lowercased addresses allauth has marked verified for `user` (e.g. via Google)."""
    return {
        email.strip().lower()
        for email in EmailAddress.objects.filter(user=user, verified=True).values_list("email", flat=True)
    }


def is_admin_email(email: str) -> bool:
    allowed = {e.strip().lower() for e in getattr(settings, "PRACTICE_ROOM_ADMIN_EMAILS", [])}
    return (email or "").strip().lower() in allowed


def is_room_admin(user) -> bool:
    """
    Superusers, or members holding a *verified* address on the admin allow-list.
    The plain `User.email` is self-declared at registration and never trusted here.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    if getattr(user, "is_superuser", False):
        return True
    return any(is_admin_email(email) for email in verified_emails(user))


def upsert_member_profile(user) -> bool:
    """
    Create or refresh the member profile for `user`.
    Returns True on success. Never raises (logs on failure).
    """
    identity = member_identity(user)
    role = MemberProfile.Role.ADMIN if is_room_admin(user) else MemberProfile.Role.USER
    try:
        MemberProfile.objects.update_or_create(
            user=user,
            defaults={
                "email": identity.email,
                "display_name": identity.display_name,
                "role": role,
            },
        )
        return True
    except Exception:
        logger.exception("Failed to upsert member profile for user %s", getattr(user, "pk", None))
        return False
