"""
Identity record projections.

IdentityRecord is the internal view and carries the password hash; Principal
is the public view handed to request handlers and API responses.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Principal:
    """Identity record without its secret."""

    id: str
    name: str
    user_name: str
    email: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        """Public JSON shape."""
        return {
            "_id": self.id,
            "name": self.name,
            "userName": self.user_name,
            "email": self.email,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class IdentityRecord:
    """Identity record including its password hash (trusted callers only)."""

    id: str
    name: str
    user_name: str
    email: str
    password_hash: str
    created_at: str

    def __post_init__(self):
        missing = [
            field
            for field in ("id", "name", "user_name", "email", "password_hash")
            if not getattr(self, field)
        ]
        if missing:
            raise ValueError(f"Identity record missing required fields: {', '.join(missing)}")

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "IdentityRecord":
        """Create from a stored document."""
        return cls(
            id=doc["_id"],
            name=doc.get("name", ""),
            user_name=doc.get("userName", ""),
            email=doc.get("email", ""),
            password_hash=doc.get("password", ""),
            created_at=doc.get("createdAt", ""),
        )

    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        return {
            "_id": self.id,
            "name": self.name,
            "userName": self.user_name,
            "email": self.email,
            "password": self.password_hash,
            "createdAt": self.created_at,
        }

    def public(self) -> Principal:
        """Project to the public view."""
        return Principal(
            id=self.id,
            name=self.name,
            user_name=self.user_name,
            email=self.email,
            created_at=self.created_at,
        )
