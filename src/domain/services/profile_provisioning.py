"""Idempotent provisioning of profile rows for signed-in identities.

Several call sites (sign-in, profile page, room join, message send, review
submit) make sure a profile exists before writing rows that reference it.
All of them go through ``ProfileProvisioningGuard.ensure_profile``:

1. read the profile by identity id and return it if present (no write);
2. derive a username and insert;
3. on a unique violation, re-read by id (a concurrent call may have won) and
   otherwise retry once with a random numeric suffix;
4. any other failure is logged and reported as ``None``.

The read is only a fast path. The primary key on ``profiles.id`` is what keeps
concurrent calls for the same identity from producing two rows.
"""

import random
from collections.abc import Callable
from typing import Optional

import structlog

from domain.entities.identity import Identity
from domain.entities.profile import InsertOutcome, Profile, ProfileInsertResult
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

FALLBACK_USERNAME = "user"
MAX_USERNAME_LENGTH = 50
MAX_USERNAME_RETRIES = 1
USERNAME_SUFFIX_RANGE = (1000, 9999)


def default_username(identity: Identity, candidate: Optional[str] = None) -> str:
    """Pick the first usable name: candidate, display name, short name, email, fallback.

    The result is cut to ``MAX_USERNAME_LENGTH`` so a retry suffix still fits.
    """
    for value in (
        candidate,
        identity.display_name,
        identity.short_name,
        identity.email_local_part,
    ):
        if value and value.strip():
            return value.strip()[:MAX_USERNAME_LENGTH].rstrip()
    return FALLBACK_USERNAME


def random_username_suffix() -> int:
    """Four-digit suffix used to disambiguate a taken username."""
    return random.randint(*USERNAME_SUFFIX_RANGE)


class ProfileProvisioningGuard:
    """Ensures a profile row exists for an identity, at most once."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        suffix_factory: Callable[[], int] = random_username_suffix,
    ) -> None:
        self._uow_factory = uow_factory
        self._suffix_factory = suffix_factory

    async def ensure_profile(
        self, identity: Identity, candidate_username: Optional[str] = None
    ) -> Optional[Profile]:
        """Return the identity's profile, creating it if needed.

        Returns None when no profile could be confirmed; callers carry on
        without one rather than failing the surrounding action.
        """
        existing = await self._lookup(identity)
        if existing is not None:
            return existing

        base_username = default_username(identity, candidate_username)
        username = base_username

        for attempt in range(MAX_USERNAME_RETRIES + 1):
            result = await self._insert(Profile(id=identity.id, username=username))

            if result.outcome is InsertOutcome.CREATED:
                logger.info(
                    "profile_created",
                    user_id=str(identity.id),
                    username=username,
                    attempt=attempt,
                )
                return result.profile

            if result.outcome is InsertOutcome.FAILED:
                logger.error(
                    "profile_insert_failed",
                    user_id=str(identity.id),
                    username=username,
                    error=result.error,
                )
                return None

            # Unique violation: either this identity was provisioned concurrently
            # or the username belongs to someone else.
            winner = await self._lookup(identity)
            if winner is not None:
                logger.info(
                    "profile_provisioned_concurrently",
                    user_id=str(identity.id),
                    username=winner.username,
                )
                return winner

            logger.warning(
                "profile_username_conflict",
                user_id=str(identity.id),
                username=username,
                attempt=attempt,
            )
            if attempt < MAX_USERNAME_RETRIES:
                username = f"{base_username}{self._suffix_factory()}"

        logger.error(
            "profile_provisioning_gave_up",
            user_id=str(identity.id),
            username=base_username,
        )
        return None

    async def _lookup(self, identity: Identity) -> Optional[Profile]:
        """Read the profile; a failed read counts as absent."""
        try:
            async with self._uow_factory() as uow:
                return await uow.profiles.get(identity.id)
        except Exception:
            logger.exception("profile_lookup_failed", user_id=str(identity.id))
            return None

    async def _insert(self, profile: Profile) -> ProfileInsertResult:
        try:
            async with self._uow_factory() as uow:
                result = await uow.profiles.insert(profile)
                if result.outcome is InsertOutcome.CREATED:
                    await uow.commit()
                return result
        except Exception as exc:
            return ProfileInsertResult.failed(f"{type(exc).__name__}: {exc}")
