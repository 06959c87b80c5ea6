"""File store protocol."""

from typing import Protocol


class IFileStore(Protocol):
    """Durable blob storage addressed by flat file names.

    Implementations must make ``save`` and ``delete`` atomic per name.
    """

    def save(self, name: str, data: bytes) -> None:
        """Write ``data`` under ``name``."""
        ...

    def delete(self, name: str) -> bool:
        """Delete ``name``. Returns False if it did not exist."""
        ...

    def exists(self, name: str) -> bool:
        """Check whether ``name`` is present."""
        ...

    def read(self, name: str) -> bytes:
        """Read back the bytes stored under ``name``."""
        ...
