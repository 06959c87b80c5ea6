"""Unit tests for RegistrationService."""

import asyncio
import threading
from pathlib import Path

import pytest

from core.exceptions import (
    ServerFailureError,
    UploadRejectedError,
    UsernameTakenError,
    ValidationFailedError,
)
from domain.entities.profile import Profile
from domain.services.credential_store import CredentialStore
from domain.services.file_lifecycle import FileLifecycleManager, Upload
from domain.services.registration_service import RegistrationService
from tests.conftest import GIF_BYTES, JPEG_BYTES, PNG_BYTES, stored_files
from tests.unit.conftest import (
    FakeUnitOfWork,
    InMemoryUnitOfWork,
    ThreadRecordingCredentialStore,
    make_candidate,
)


@pytest.fixture
def service(
    uow: FakeUnitOfWork, credentials: CredentialStore, files: FileLifecycleManager
) -> RegistrationService:
    uow.profiles.username_exists.return_value = False
    uow.profiles.create.side_effect = lambda profile: profile
    return RegistrationService(lambda: uow, credentials=credentials, files=files)


# --- register ---


class TestRegister:
    @pytest.mark.asyncio
    async def test_registers_profile(
        self, service: RegistrationService, uow: FakeUnitOfWork, credentials: CredentialStore
    ):
        result = await service.register(make_candidate())

        assert result.username == "jdoe"
        assert result.profile_photo is None
        assert result.password_hash != "secret12!"
        assert credentials.verify("secret12!", result.password_hash)
        uow.profiles.create.assert_called_once()
        assert uow.committed

    @pytest.mark.asyncio
    async def test_registers_with_photo(
        self, service: RegistrationService, files: FileLifecycleManager
    ):
        result = await service.register(make_candidate(), Upload(PNG_BYTES, "image/png", "me.png"))

        assert result.profile_photo is not None
        assert files.exists(result.profile_photo)
        assert files.read(result.profile_photo) == PNG_BYTES

    @pytest.mark.asyncio
    async def test_student_company_name_is_dropped(self, service: RegistrationService):
        result = await service.register(
            make_candidate(profession="Student", company_name="Ignored Inc")
        )

        assert result.company_name is None

    @pytest.mark.asyncio
    async def test_entrepreneur_keeps_company_name(self, service: RegistrationService):
        result = await service.register(
            make_candidate(profession="Entrepreneur", company_name="Acme")
        )

        assert result.company_name == "Acme"

    @pytest.mark.asyncio
    async def test_male_custom_gender_is_dropped(self, service: RegistrationService):
        result = await service.register(make_candidate(gender="Male", custom_gender="x"))

        assert result.custom_gender is None

    @pytest.mark.asyncio
    async def test_rejected_upload_writes_nothing(
        self, service: RegistrationService, uow: FakeUnitOfWork, upload_dir: Path
    ):
        with pytest.raises(UploadRejectedError):
            await service.register(make_candidate(), Upload(GIF_BYTES, "image/gif", "me.gif"))

        uow.profiles.create.assert_not_called()
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_validation_failure_discards_photo(
        self, service: RegistrationService, uow: FakeUnitOfWork, upload_dir: Path
    ):
        with pytest.raises(ValidationFailedError) as exc_info:
            await service.register(
                make_candidate(username="ab", profession="Entrepreneur"),
                Upload(PNG_BYTES, "image/png"),
            )

        fields = {d["field"] for d in exc_info.value.details}
        assert fields == {"username", "companyName"}
        uow.profiles.create.assert_not_called()
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_username_taken_discards_photo(
        self, service: RegistrationService, uow: FakeUnitOfWork, upload_dir: Path
    ):
        uow.profiles.username_exists.return_value = True

        with pytest.raises(UsernameTakenError) as exc_info:
            await service.register(make_candidate(), Upload(PNG_BYTES, "image/png"))

        assert exc_info.value.message == "Username already taken"
        uow.profiles.create.assert_not_called()
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_constraint_violation_on_insert_discards_photo(
        self, service: RegistrationService, uow: FakeUnitOfWork, upload_dir: Path
    ):
        uow.profiles.create.side_effect = UsernameTakenError("jdoe")

        with pytest.raises(UsernameTakenError):
            await service.register(make_candidate(), Upload(PNG_BYTES, "image/png"))

        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_persistence_failure_is_server_failure(
        self, service: RegistrationService, uow: FakeUnitOfWork, upload_dir: Path
    ):
        uow.profiles.create.side_effect = RuntimeError("connection reset by peer")

        with pytest.raises(ServerFailureError) as exc_info:
            await service.register(make_candidate(), Upload(JPEG_BYTES, "image/jpeg"))

        assert exc_info.value.status_code == 500
        assert "connection reset" not in exc_info.value.message
        assert stored_files(upload_dir) == []

    @pytest.mark.asyncio
    async def test_commit_failure_discards_photo(
        self, service: RegistrationService, uow: FakeUnitOfWork, upload_dir: Path
    ):
        uow.commit_error = RuntimeError("disk full")

        with pytest.raises(ServerFailureError):
            await service.register(make_candidate(), Upload(PNG_BYTES, "image/png"))

        assert stored_files(upload_dir) == []


class TestBlockingWork:
    @pytest.mark.asyncio
    async def test_hashing_runs_off_the_event_loop(
        self, uow: FakeUnitOfWork, files: FileLifecycleManager
    ):
        uow.profiles.username_exists.return_value = False
        uow.profiles.create.side_effect = lambda profile: profile
        credentials = ThreadRecordingCredentialStore()
        service = RegistrationService(lambda: uow, credentials=credentials, files=files)

        await service.register(make_candidate())

        assert len(credentials.threads) == 1
        assert credentials.threads[0] is not threading.main_thread()


class TestConcurrentRegistration:
    @pytest.mark.asyncio
    async def test_exactly_one_wins(
        self, credentials: CredentialStore, files: FileLifecycleManager, upload_dir: Path
    ):
        rows: dict[str, Profile] = {}
        service = RegistrationService(
            lambda: InMemoryUnitOfWork(rows), credentials=credentials, files=files
        )

        results = await asyncio.gather(
            service.register(make_candidate(), Upload(PNG_BYTES, "image/png")),
            service.register(make_candidate(), Upload(JPEG_BYTES, "image/jpeg")),
            return_exceptions=True,
        )

        winners = [r for r in results if isinstance(r, Profile)]
        losers = [r for r in results if isinstance(r, UsernameTakenError)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert stored_files(upload_dir) == [files.name_for(winners[0].profile_photo)]
        assert rows["jdoe"].profile_photo == winners[0].profile_photo


# --- check_username ---


class TestCheckUsername:
    @pytest.mark.asyncio
    async def test_malformed(self, service: RegistrationService, uow: FakeUnitOfWork):
        result = await service.check_username("a b")

        assert not result.well_formed
        assert not result.available
        uow.profiles.username_exists.assert_not_called()

    @pytest.mark.asyncio
    async def test_available(self, service: RegistrationService):
        result = await service.check_username("newuser")

        assert result.available
        assert result.message == "Username is available"

    @pytest.mark.asyncio
    async def test_taken(self, service: RegistrationService, uow: FakeUnitOfWork):
        uow.profiles.username_exists.return_value = True

        result = await service.check_username("jdoe")

        assert result.well_formed
        assert not result.available
        assert result.message == "Username is already taken"
