"""Profile photo staging, replacement and cleanup."""

import asyncio
import secrets
import time
from dataclasses import dataclass
from types import TracebackType
from typing import Optional

import structlog

from core.exceptions import FileStoreError, UploadRejectedError
from domain.repositories.file_store import IFileStore
from domain.services.profile_validation import Violation

logger = structlog.get_logger()

PHOTO_FIELD = "profilePhoto"
TYPE_REJECTED_MESSAGE = "Only JPG and PNG files are allowed."

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
}


@dataclass(frozen=True)
class UploadPolicy:
    """Which uploads are accepted."""

    allowed_mime_types: frozenset[str]
    max_bytes: int


@dataclass(frozen=True)
class Upload:
    """An uploaded file as received from the client."""

    data: bytes
    content_type: str
    filename: str | None = None


@dataclass(frozen=True)
class UploadDecision:
    accepted: bool
    reason: str | None = None


@dataclass(frozen=True)
class StagedFile:
    """An upload written to durable storage but not yet bound to a record."""

    ref: str
    name: str
    size: int


def evaluate_upload(upload: Upload, policy: UploadPolicy) -> UploadDecision:
    """Decide whether an upload is acceptable. Pure; touches no storage."""
    mime = (upload.content_type or "").split(";")[0].strip().lower()
    if mime not in policy.allowed_mime_types:
        return UploadDecision(accepted=False, reason=TYPE_REJECTED_MESSAGE)
    if len(upload.data) > policy.max_bytes:
        limit_mb = policy.max_bytes / (1024 * 1024)
        return UploadDecision(
            accepted=False,
            reason=f"File is too large. Maximum size is {limit_mb:g} MB.",
        )
    return UploadDecision(accepted=True)


class FileLifecycleManager:
    """Keeps stored profile photos in step with profile records.

    References handed out look like ``{url_prefix}/profile-{ms}-{random}.png``
    and map one-to-one onto names in the underlying store.
    """

    def __init__(
        self,
        store: IFileStore,
        policy: UploadPolicy,
        url_prefix: str = "/uploads",
    ) -> None:
        self._store = store
        self._policy = policy
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def policy(self) -> UploadPolicy:
        return self._policy

    def stage(self, upload: Upload) -> StagedFile:
        """Validate and write an upload.

        Raises:
            UploadRejectedError: Wrong type or too large. Nothing is written.
            FileStoreError: The store failed to write the file.
        """
        decision = evaluate_upload(upload, self._policy)
        if not decision.accepted:
            logger.info(
                "photo_rejected",
                content_type=upload.content_type,
                size=len(upload.data),
                reason=decision.reason,
            )
            raise UploadRejectedError(Violation(PHOTO_FIELD, decision.reason or ""))

        name = self._new_name(upload.content_type)
        try:
            self._store.save(name, upload.data)
        except OSError as exc:
            logger.error("photo_stage_failed", name=name, error=str(exc))
            raise FileStoreError() from exc

        logger.info("photo_staged", name=name, size=len(upload.data))
        return StagedFile(ref=f"{self._url_prefix}/{name}", name=name, size=len(upload.data))

    def discard(self, ref: str | None) -> None:
        """Delete the file behind ``ref``. A missing file is not an error."""
        if not ref:
            return
        name = self.name_for(ref)
        if self._store.delete(name):
            logger.info("photo_discarded", name=name)

    def replace(self, old_ref: str | None, staged: StagedFile) -> str:
        """Swap ``old_ref`` for an already written staged file.

        The old file is only removed once the new one is confirmed present.
        """
        if not self._store.exists(staged.name):
            raise FileStoreError("Staged profile photo is missing from storage")
        if old_ref and old_ref != staged.ref:
            self.discard(old_ref)
        return staged.ref

    def exists(self, ref: str) -> bool:
        return self._store.exists(self.name_for(ref))

    def read(self, ref: str) -> bytes:
        return self._store.read(self.name_for(ref))

    def begin(self, upload: Optional[Upload]) -> "PhotoChange":
        """Return the pending change for ``upload``. Staging happens on entry."""
        return PhotoChange(self, upload)

    def name_for(self, ref: str) -> str:
        """Map a reference back onto a flat store name."""
        return ref.rstrip("/").rsplit("/", 1)[-1]

    def _new_name(self, content_type: str) -> str:
        mime = content_type.split(";")[0].strip().lower()
        suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"profile-{suffix}{_EXTENSIONS.get(mime, '')}"


class PhotoChange:
    """A photo upload awaiting the outcome of the record write.

    The upload is staged on entry. Settled exactly once: ``commit`` retires
    the superseded photo, ``rollback`` removes the newly staged one. An
    exception leaving the block rolls back and a clean exit commits. With
    nothing uploaded both steps are no-ops.

    ``async with`` runs staging and settling in a worker thread so file
    I/O stays off the event loop.
    """

    def __init__(self, manager: FileLifecycleManager, upload: Optional[Upload]) -> None:
        self._manager = manager
        self._upload = upload
        self._staged: Optional[StagedFile] = None
        self._superseded: str | None = None
        self._settled = False

    @property
    def staged(self) -> Optional[StagedFile]:
        return self._staged

    @property
    def new_ref(self) -> str | None:
        return self._staged.ref if self._staged else None

    def supersedes(self, ref: str | None) -> None:
        """Mark the photo the new one replaces, removed on commit."""
        self._superseded = ref

    def stage(self) -> None:
        if self._upload is not None and self._staged is None:
            self._staged = self._manager.stage(self._upload)

    def commit(self) -> None:
        if self._settled:
            return
        self._settled = True
        if self._staged is None:
            return
        try:
            self._manager.replace(self._superseded, self._staged)
        except (OSError, FileStoreError):
            # The record already points at the new photo
            logger.exception("photo_commit_cleanup_failed", superseded=self._superseded)

    def rollback(self) -> None:
        if self._settled:
            return
        self._settled = True
        if self._staged is None:
            return
        try:
            self._manager.discard(self._staged.ref)
        except OSError:
            logger.exception("photo_rollback_failed", ref=self._staged.ref)
            raise

    def settle(self, error: Optional[BaseException]) -> None:
        """Commit when ``error`` is None, otherwise roll back.

        A failed rollback leaves an orphaned file, which is reported as a
        FileStoreError chained from ``error``.
        """
        if error is None:
            self.commit()
            return
        try:
            self.rollback()
        except OSError:
            logger.error(
                "photo_orphaned",
                ref=self.new_ref,
                cause=str(error),
                cause_type=type(error).__name__,
            )
            raise FileStoreError("Staged profile photo could not be removed") from error

    def __enter__(self) -> "PhotoChange":
        self.stage()
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.settle(exc_val)

    async def __aenter__(self) -> "PhotoChange":
        await asyncio.to_thread(self.stage)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await asyncio.to_thread(self.settle, exc_val)
