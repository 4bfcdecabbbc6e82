"""Account, profile and role management."""

from __future__ import annotations

from ConfDesk.backend.gateway import Gateway
from ConfDesk.core.errors import ValidationError
from ConfDesk.core.models import Profile
from ConfDesk.utils.log import log

MANAGEABLE_ROLES = ("author", "reviewer")


def can_change_role(actor: Profile, target: Profile) -> bool:
    """Organizers may change anyone except other organizers and themselves."""
    return actor.role == "organizer" and target.role != "organizer" and target.id != actor.id


class UserService:
    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway

    async def sign_in(self, email: str, password: str) -> Profile:
        """Authenticate and load the caller's profile."""
        if not email.strip():
            raise ValidationError("email", "email is required")
        if not password:
            raise ValidationError("password", "password is required")
        user_id = await self.gateway.sign_in(email.strip(), password)
        profile = await self.gateway.fetch_profile(user_id)
        log.info("Signed in as %s (%s)", profile.full_name or profile.email, profile.role)
        return profile

    async def list_profiles(self) -> list[Profile]:
        return await self.gateway.list_profiles()

    async def save_profile(self, user_id: str, *, full_name: str, institution: str | None) -> Profile:
        if not full_name.strip():
            raise ValidationError("full_name", "full name is required")
        return await self.gateway.update_profile(
            user_id,
            {"full_name": full_name.strip(), "institution": (institution or "").strip() or None},
        )

    async def set_role(self, actor: Profile, target: Profile, role: str) -> bool:
        """Change ``target``'s role through the backend procedure.

        Returns:
            False when the change is skipped (organizer target, self, or an
            unchanged role), True after the backend accepted it.
        """
        if role not in MANAGEABLE_ROLES:
            raise ValidationError("role", f"role must be one of {', '.join(MANAGEABLE_ROLES)}")
        if not can_change_role(actor, target) or role == target.role:
            log.debug("Role change for %s skipped", target.id)
            return False
        await self.gateway.set_user_role(target.id, role)
        log.info("Role of %s set to %s", target.id, role)
        return True
