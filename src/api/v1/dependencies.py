"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.credential_store import CredentialStore
from domain.services.file_lifecycle import FileLifecycleManager, UploadPolicy
from domain.services.profile_update_service import ProfileUpdateService
from domain.services.registration_service import RegistrationService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.storage.local_file_store import LocalFileStore


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


def get_upload_policy() -> UploadPolicy:
    """Upload rules derived from settings."""
    return UploadPolicy(
        allowed_mime_types=settings.allowed_upload_types_set,
        max_bytes=settings.max_upload_bytes,
    )


@lru_cache
def get_credential_store() -> CredentialStore:
    """Get CredentialStore instance."""
    return CredentialStore(rounds=settings.bcrypt_rounds)


@lru_cache
def get_file_lifecycle_manager() -> FileLifecycleManager:
    """Get FileLifecycleManager instance backed by the upload directory."""
    return FileLifecycleManager(
        LocalFileStore(settings.upload_dir),
        get_upload_policy(),
        url_prefix=settings.upload_url_prefix,
    )


@lru_cache
def get_registration_service() -> RegistrationService:
    """Get Registration service instance."""
    return RegistrationService(
        get_uow_factory(),
        credentials=get_credential_store(),
        files=get_file_lifecycle_manager(),
    )


@lru_cache
def get_profile_update_service() -> ProfileUpdateService:
    """Get Profile update service instance."""
    return ProfileUpdateService(
        get_uow_factory(),
        credentials=get_credential_store(),
        files=get_file_lifecycle_manager(),
    )
