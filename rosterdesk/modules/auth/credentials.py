"""
Credential store - password hashing at rest.

Hashes are bcrypt (salted, cost factor configurable). Verification uses
bcrypt.checkpw, which compares digests in constant time.
"""

import logging

import bcrypt

logger = logging.getLogger(__name__)

MIN_ROUNDS = 4
MAX_ROUNDS = 31


class CredentialStore:
    """
    Hashes and verifies secrets.

    Hashing happens once per secret-set event (creation or change); verifying
    never re-hashes the stored value.
    """

    def __init__(self, rounds: int = 10):
        """
        Initialize credential store.

        Args:
            rounds: bcrypt cost factor (10-12 recommended)

        Raises:
            ValueError: If rounds is outside bcrypt's supported range
        """
        if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            raise ValueError(f"bcrypt rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}")
        self.rounds = rounds
        # Used to spend equal effort when a login name is unknown
        self._dummy_hash = self.hash("rosterdesk-dummy-secret")

    def hash(self, plaintext: str) -> str:
        """
        Hash a plaintext secret.

        Args:
            plaintext: Secret to hash

        Returns:
            bcrypt hash as text (``$2b$<rounds>$...``)
        """
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, secret_hash: str) -> bool:
        """
        Verify a plaintext secret against a stored hash.

        Returns:
            True if it matches; False on mismatch or any malformed input
        """
        if not isinstance(plaintext, str) or not isinstance(secret_hash, str):
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), secret_hash.encode("utf-8"))
        except ValueError:
            logger.debug("Stored password hash is malformed")
            return False

    def burn(self, plaintext: str) -> bool:
        """Run one verification against a fixed hash and always return False."""
        self.verify(plaintext or "", self._dummy_hash)
        return False
