"""
Staff Module - Black Box Interface

Purpose: Staff records (name, staff ID, role, shift)
Interface: create_staff(), get_staff(), list_staff(), update_staff(), delete_staff()
Hidden: Storage layout, field trimming, unique staff ID enforcement
"""

from .staff import StaffMember, StaffModule, StaffValidationError

__all__ = ["StaffModule", "StaffMember", "StaffValidationError"]
