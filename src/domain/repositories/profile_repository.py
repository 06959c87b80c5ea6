"""Profile repository protocol."""

from typing import Protocol

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities, keyed by username."""

    async def get_by_username(self, username: str) -> Profile | None:
        """Get a profile by its exact username."""
        ...

    async def username_exists(self, username: str) -> bool:
        """Check whether a username is already registered."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile.

        Raises:
            UsernameTakenError: If the datastore's uniqueness constraint
                rejects the username.
        """
        ...

    async def update(self, profile: Profile) -> Profile:
        """Persist changes to an existing profile."""
        ...
