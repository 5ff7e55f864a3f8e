import logging
from datetime import UTC, datetime
from typing import List, Optional

from ..auth.credentials import CredentialStore
from ..storage import DocumentStore, RecordNotFoundError, new_id
from .models import IdentityRecord, Principal

logger = logging.getLogger("rosterdesk.users")

UNIQUE_FIELDS = ("userName", "email")


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


class UserModule:
    def __init__(self, store: DocumentStore, credentials: CredentialStore):
        """
        Initialize user module.

        Args:
            store: Document store for the users collection (unique userName, email)
            credentials: Credential store used to hash passwords
        """
        self.store = store
        self.credentials = credentials

    async def create_user(
        self, name: str, user_name: str, email: str, password: str
    ) -> Principal:
        """
        Register a new identity.

        The password is hashed here, once, before the record is persisted.

        Raises:
            ValueError: If a required field is missing
            DuplicateKeyError: If userName or email is already taken
        """
        if not isinstance(password, str) or not password:
            raise ValueError("Please add a password")

        record = IdentityRecord(
            id=new_id(),
            name=_clean(name),
            user_name=_clean(user_name),
            email=_clean(email).lower(),
            password_hash=self.credentials.hash(password),
            created_at=datetime.now(UTC).isoformat(),
        )
        await self.store.insert(record.to_document())

        logger.info(f"User created: {record.user_name} ({record.id})")
        return record.public()

    async def get_principal(self, identity_id: str) -> Optional[Principal]:
        """Public view of a user, or None."""
        doc = await self.store.get(identity_id)
        if doc is None:
            return None
        return IdentityRecord.from_document(doc).public()

    async def get_identity_by_username(self, user_name: str) -> Optional[IdentityRecord]:
        """Internal view (with password hash) for credential checks."""
        doc = await self.store.find_one("userName", _clean(user_name))
        if doc is None:
            return None
        return IdentityRecord.from_document(doc)

    async def list_principals(self) -> List[Principal]:
        docs = await self.store.list()
        principals = [IdentityRecord.from_document(d).public() for d in docs]
        return sorted(principals, key=lambda p: p.created_at)

    async def update_user(
        self,
        identity_id: str,
        name: Optional[str] = None,
        user_name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Principal:
        """
        Update a user. Only a supplied password is re-hashed.

        Raises:
            RecordNotFoundError: If the user does not exist
            DuplicateKeyError: If the new userName or email is taken
            ValueError: If a supplied field is blank
        """
        changes = {}
        for key, value in (("name", name), ("userName", user_name), ("email", email)):
            if value is None:
                continue
            cleaned = _clean(value)
            if not cleaned:
                raise ValueError(f"{key} cannot be empty")
            changes[key] = cleaned.lower() if key == "email" else cleaned

        if password is not None:
            changes["password"] = self.credentials.hash(password)

        if not changes:
            principal = await self.get_principal(identity_id)
            if principal is None:
                raise RecordNotFoundError(self.store.collection, identity_id)
            return principal

        doc = await self.store.update(identity_id, changes)
        logger.info(f"User updated: {identity_id}")
        return IdentityRecord.from_document(doc).public()

    async def delete_user(self, identity_id: str) -> None:
        await self.store.delete(identity_id)
        logger.info(f"User deleted: {identity_id}")
