"""Shared fixtures for unit tests."""

import asyncio
import threading
from dataclasses import replace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from core.exceptions import UsernameTakenError
from domain.entities.profile import Gender, Profession, Profile, ProfileCandidate
from domain.services.credential_store import CredentialStore


class FakeUnitOfWork:
    """Fake Unit of Work with a mocked profile repository for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.committed = False
        self.rolled_back = False
        self.commit_error: Exception | None = None

    async def commit(self) -> None:
        if self.commit_error is not None:
            raise self.commit_error
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class InMemoryProfileRepository:
    """Profile repository over a shared dict, enforcing unique usernames on insert.

    ``create`` yields to the event loop before inserting so that concurrent
    registrations interleave between the existence check and the write.
    """

    def __init__(self, rows: dict[str, Profile]) -> None:
        self._rows = rows

    async def get_by_username(self, username: str) -> Profile | None:
        row = self._rows.get(username)
        return replace(row) if row else None

    async def username_exists(self, username: str) -> bool:
        return username in self._rows

    async def create(self, profile: Profile) -> Profile:
        await asyncio.sleep(0)
        if profile.username in self._rows:
            raise UsernameTakenError(profile.username)
        self._rows[profile.username] = replace(profile)
        return profile

    async def update(self, profile: Profile) -> Profile:
        self._rows[profile.username] = replace(profile)
        return profile


class InMemoryUnitOfWork:
    def __init__(self, rows: dict[str, Profile]) -> None:
        self.profiles = InMemoryProfileRepository(rows)

    async def commit(self) -> None:
        await asyncio.sleep(0)

    async def rollback(self) -> None:
        pass

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


def make_candidate(**overrides: Any) -> ProfileCandidate:
    """A candidate that passes every rule unless overridden."""
    values: dict[str, Any] = {
        "username": "jdoe",
        "password": "secret12!",
        "profession": "Developer",
        "address_line1": "1 Main Street",
        "country": "India",
        "state": "Maharashtra",
        "city": "Mumbai",
        "subscription_plan": "Pro",
        "newsletter": True,
        "gender": "Female",
    }
    values.update(overrides)
    return ProfileCandidate(**values)


def make_profile(password_hash: str, **overrides: Any) -> Profile:
    values: dict[str, Any] = {
        "username": "jdoe",
        "password_hash": password_hash,
        "profession": Profession.DEVELOPER,
        "address_line1": "1 Main Street",
        "country": "India",
        "state": "Maharashtra",
        "city": "Mumbai",
        "gender": Gender.FEMALE,
    }
    values.update(overrides)
    return Profile(**values)


class ThreadRecordingCredentialStore(CredentialStore):
    """Records which thread each bcrypt call runs on."""

    def __init__(self) -> None:
        super().__init__(rounds=4)
        self.threads: list[threading.Thread] = []

    def hash(self, plaintext: str) -> str:
        self.threads.append(threading.current_thread())
        return super().hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        self.threads.append(threading.current_thread())
        return super().verify(plaintext, hashed)
