"""Registration service layer with business logic."""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from core.exceptions import (
    AppException,
    ServerFailureError,
    UsernameTakenError,
    ValidationFailedError,
)
from domain.entities.profile import Profile, ProfileCandidate
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.credential_store import CredentialStore
from domain.services.file_lifecycle import FileLifecycleManager, Upload
from domain.services.profile_validation import (
    ProfileValidationPipeline,
    username_format_violations,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class UsernameAvailability:
    available: bool
    message: str
    well_formed: bool = True


class RegistrationService:
    """Creates new profiles.

    The photo (if any) is staged before validation and bound to the
    outcome of the whole registration: it is removed on every failure path.
    """

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

    async def register(
        self, candidate: ProfileCandidate, upload: Optional[Upload] = None
    ) -> Profile:
        """Validate, hash and persist a new profile.

        Raises:
            UploadRejectedError: The photo was refused; nothing was written.
            ValidationFailedError: One or more fields are invalid.
            UsernameTakenError: The username is already registered.
            ServerFailureError: The datastore failed.
        """
        async with self._files.begin(upload) as photo:
            violations = self._pipeline.validate(candidate)
            if violations:
                raise ValidationFailedError(violations)

            async with self._uow_factory() as uow:
                # Fast rejection only; the unique constraint is the final authority
                if await uow.profiles.username_exists(candidate.username):
                    raise UsernameTakenError(candidate.username)

                password_hash = await asyncio.to_thread(
                    self._credentials.hash, candidate.password
                )
                profile = Profile.from_candidate(
                    candidate,
                    password_hash=password_hash,
                    profile_photo=photo.new_ref,
                )
                try:
                    created = await uow.profiles.create(profile)
                    await uow.commit()
                except AppException:
                    raise
                except Exception as exc:
                    logger.error(
                        "profile_registration_failed",
                        username=candidate.username,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    raise ServerFailureError("Server error during registration") from exc

        logger.info(
            "profile_registered",
            username=created.username,
            has_photo=created.profile_photo is not None,
        )
        return created

    async def check_username(self, username: str) -> UsernameAvailability:
        """Report whether a username is well formed and still free."""
        violations = username_format_violations(username)
        if violations:
            return UsernameAvailability(
                available=False,
                message=violations[0].message,
                well_formed=False,
            )

        async with self._uow_factory() as uow:
            taken = await uow.profiles.username_exists(username)

        return UsernameAvailability(
            available=not taken,
            message="Username is already taken" if taken else "Username is available",
        )
