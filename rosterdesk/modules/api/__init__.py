"""
API Module - Black Box Interface

Purpose: HTTP request models
Interface: pydantic models used by the route handlers in rosterdesk.main
Hidden: Field aliases and validation constraints

The API module only describes payloads - it contains no business logic.
"""

from .models import (
    AttendanceRequest,
    BulkAttendanceEntry,
    BulkAttendanceRequest,
    LoginRequest,
    RegisterRequest,
    StaffRequest,
    UpdateAttendanceRequest,
    UpdateUserRequest,
)

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "UpdateUserRequest",
    "StaffRequest",
    "AttendanceRequest",
    "BulkAttendanceEntry",
    "BulkAttendanceRequest",
    "UpdateAttendanceRequest",
]
