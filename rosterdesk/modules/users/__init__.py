"""
Users Module - Black Box Interface

Purpose: Identity records (login name, contact address, hashed password)
Interface: create_user(), get_principal(), get_identity_by_username(), update_user()
Hidden: Storage layout, password hashing, unique index enforcement

The password hash only leaves this module through IdentityRecord, which
callers request explicitly; everything else sees Principal.
"""

from .models import IdentityRecord, Principal
from .users import UNIQUE_FIELDS, UserModule

__all__ = ["UserModule", "IdentityRecord", "Principal", "UNIQUE_FIELDS"]
