import logging
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from ..storage import DocumentStore, RecordNotFoundError, new_id

logger = logging.getLogger("rosterdesk.staff")

REQUIRED_FIELDS = {
    "name": "Please add a name",
    "staffId": "Please add a staff ID",
    "role": "Please add a role",
    "shift": "Please add shift details",
}


class StaffValidationError(ValueError):
    """One or more staff fields are missing."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(errors.values()))
        self.errors = errors


@dataclass
class StaffMember:
    """A scheduled staff member."""

    _id: str
    name: str
    staffId: str
    role: str
    shift: str
    createdAt: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "StaffMember":
        return cls(
            _id=doc["_id"],
            name=doc.get("name", ""),
            staffId=doc.get("staffId", ""),
            role=doc.get("role", ""),
            shift=doc.get("shift", ""),
            createdAt=doc.get("createdAt", ""),
        )


def _trimmed(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v.strip() if isinstance(v, str) else v for k, v in fields.items()}


class StaffModule:
    def __init__(self, store: DocumentStore):
        """
        Initialize staff module.

        Args:
            store: Document store for the staff collection (unique staffId)
        """
        self.store = store

    async def create_staff(
        self, name: str, staff_id: str, role: str, shift: str
    ) -> StaffMember:
        """
        Create a staff record.

        Raises:
            StaffValidationError: If a required field is missing or blank
            DuplicateKeyError: If staffId is taken
        """
        fields = _trimmed({"name": name, "staffId": staff_id, "role": role, "shift": shift})
        errors = {k: msg for k, msg in REQUIRED_FIELDS.items() if not fields.get(k)}
        if errors:
            raise StaffValidationError(errors)

        doc = await self.store.insert(
            {"_id": new_id(), **fields, "createdAt": datetime.now(UTC).isoformat()}
        )
        logger.info(f"Staff created: {fields['staffId']}")
        return StaffMember.from_document(doc)

    async def get_staff(self, record_id: str) -> Optional[StaffMember]:
        doc = await self.store.get(record_id)
        return StaffMember.from_document(doc) if doc else None

    async def get_by_staff_id(self, staff_id: str) -> Optional[StaffMember]:
        doc = await self.store.find_one("staffId", staff_id.strip())
        return StaffMember.from_document(doc) if doc else None

    async def resolve(self, reference: str) -> Optional[StaffMember]:
        """Find a staff member by record id or by staffId."""
        return await self.get_staff(reference) or await self.get_by_staff_id(reference)

    async def list_staff(self, role: Optional[str] = None, shift: Optional[str] = None) -> List[StaffMember]:
        members = [StaffMember.from_document(d) for d in await self.store.list()]
        if role:
            members = [m for m in members if m.role == role]
        if shift:
            members = [m for m in members if m.shift == shift]
        return sorted(members, key=lambda m: m.name)

    async def update_staff(self, record_id: str, changes: Dict[str, Any]) -> StaffMember:
        """
        Update a staff record.

        Raises:
            RecordNotFoundError: If the record does not exist
            StaffValidationError: If a required field is blanked
            DuplicateKeyError: If the new staffId is taken
        """
        allowed = {k: v for k, v in _trimmed(changes).items() if k in REQUIRED_FIELDS and v is not None}
        errors = {k: REQUIRED_FIELDS[k] for k, v in allowed.items() if not v}
        if errors:
            raise StaffValidationError(errors)

        if not allowed:
            member = await self.get_staff(record_id)
            if member is None:
                raise RecordNotFoundError(self.store.collection, record_id)
            return member

        doc = await self.store.update(record_id, allowed)
        logger.info(f"Staff updated: {record_id}")
        return StaffMember.from_document(doc)

    async def delete_staff(self, record_id: str) -> None:
        await self.store.delete(record_id)
        logger.info(f"Staff deleted: {record_id}")
