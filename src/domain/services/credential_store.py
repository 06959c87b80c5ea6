"""Password hashing and verification."""

import base64
import hashlib

import bcrypt


class CredentialStore:
    """bcrypt-backed credential hashing.

    Passwords are pre-hashed with SHA-256 so that bcrypt's 72-byte input
    limit never truncates long passphrases. Password policy is enforced
    by the validation pipeline, not here.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._prehash(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return True iff ``plaintext`` matches ``hashed``. Never raises on mismatch."""
        if not plaintext or not hashed:
            return False
        try:
            return bcrypt.checkpw(self._prehash(plaintext), hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    @staticmethod
    def _prehash(plaintext: str) -> bytes:
        digest = hashlib.sha256(plaintext.encode("utf-8")).digest()
        return base64.b64encode(digest)
