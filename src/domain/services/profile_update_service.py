"""Profile update service layer with business logic."""

import asyncio
from typing import Callable, Optional

import structlog

from core.exceptions import (
    AppException,
    PasswordMismatchError,
    ProfileNotFoundError,
    ServerFailureError,
    ValidationFailedError,
)
from domain.entities.profile import PasswordChange, Profile, ProfilePatch
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.credential_store import CredentialStore
from domain.services.file_lifecycle import FileLifecycleManager, Upload
from domain.services.profile_validation import (
    ProfileValidationPipeline,
    Violation,
    password_policy_violations,
)

logger = structlog.get_logger()


class ProfileUpdateService:
    """Applies partial updates, password changes and photo replacement."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        credentials: CredentialStore,
        files: FileLifecycleManager,
        pipeline: Optional[ProfileValidationPipeline] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._credentials = credentials
        self._files = files
        self._pipeline = pipeline or ProfileValidationPipeline()

    async def update(
        self,
        username: str,
        patch: ProfilePatch,
        password_change: Optional[PasswordChange] = None,
        upload: Optional[Upload] = None,
    ) -> Profile:
        """Update an existing profile.

        A new photo is staged first. The previous photo is only removed
        after the record pointing at the new one has been committed; on any
        failure the new photo is removed and the old file and record stay
        as they were.
        """
        async with self._files.begin(upload) as photo:
            async with self._uow_factory() as uow:
                profile = await uow.profiles.get_by_username(username)
                if not profile:
                    raise ProfileNotFoundError(username)

                if password_change is not None:
                    await self._change_password(profile, password_change)

                candidate = patch.merged_with(profile)
                violations = self._pipeline.validate(candidate, include_password=False)
                if violations:
                    raise ValidationFailedError(violations)
                profile.apply_details(candidate)

                if photo.new_ref:
                    photo.supersedes(profile.profile_photo)
                    profile.profile_photo = photo.new_ref

                profile.touch()
                try:
                    updated = await uow.profiles.update(profile)
                    await uow.commit()
                except AppException:
                    raise
                except Exception as exc:
                    logger.error(
                        "profile_update_failed",
                        username=username,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    raise ServerFailureError("Server error during profile update") from exc

        logger.info(
            "profile_updated",
            username=username,
            password_changed=password_change is not None,
            photo_replaced=photo.new_ref is not None,
        )
        return updated

    async def verify_password(self, username: str, current_password: str) -> None:
        """Check a user's current password.

        Raises:
            ValidationFailedError: Username or password missing.
            ProfileNotFoundError: No such user.
            PasswordMismatchError: Password does not match.
        """
        missing = [
            Violation(field, f"{label} is required")
            for field, label, value in (
                ("username", "Username", username),
                ("currentPassword", "Current password", current_password),
            )
            if not value
        ]
        if missing:
            raise ValidationFailedError(missing)

        async with self._uow_factory() as uow:
            profile = await uow.profiles.get_by_username(username)
        if not profile:
            raise ProfileNotFoundError(username)
        if not await asyncio.to_thread(
            self._credentials.verify, current_password, profile.password_hash
        ):
            raise PasswordMismatchError()

    async def _change_password(self, profile: Profile, change: PasswordChange) -> None:
        if not await asyncio.to_thread(
            self._credentials.verify, change.current_password, profile.password_hash
        ):
            raise PasswordMismatchError()
        violations = password_policy_violations(change.new_password, field="newPassword")
        if violations:
            raise ValidationFailedError(violations)
        profile.password_hash = await asyncio.to_thread(
            self._credentials.hash, change.new_password
        )
