"""
Rosterdesk request models.

Field names follow the JSON the API speaks (camelCase); Python attributes
are snake_case with aliases.
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..attendance import AttendanceStatus


class CamelModel(BaseModel):
    """
    Base model accepting both alias and attribute names.

    Strings are passed through untouched: passwords must keep their exact
    bytes, and the modules trim the other fields themselves.
    """

    model_config = ConfigDict(populate_by_name=True)


# Auth


class LoginRequest(CamelModel):
    """Credentials for POST /api/auth/login. Both fields may be absent."""

    user_name: Optional[str] = Field(None, alias="userName")
    password: Optional[str] = None


class RegisterRequest(CamelModel):
    """New identity for POST /api/auth/register and POST /api/users."""

    name: str = Field(..., min_length=1, max_length=100)
    user_name: str = Field(..., alias="userName", min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=1, max_length=72)


class UpdateUserRequest(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    user_name: Optional[str] = Field(None, alias="userName", max_length=50)
    email: Optional[str] = Field(None, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: Optional[str] = Field(None, min_length=1, max_length=72)


# Staff


class StaffRequest(CamelModel):
    """Staff fields; presence of required ones is checked by the staff module."""

    name: Optional[str] = None
    staff_id: Optional[str] = Field(None, alias="staffId")
    role: Optional[str] = None
    shift: Optional[str] = None


# Attendance


class AttendanceRequest(CamelModel):
    """Mark attendance for one staff member (record id or staffId)."""

    staff: Optional[str] = None
    staff_id: Optional[str] = Field(None, alias="staffId")
    date: dt.date
    status: AttendanceStatus
    shift: Optional[str] = None
    remarks: Optional[str] = Field(None, max_length=500)


class BulkAttendanceEntry(CamelModel):
    """
    One entry of a bulk request.

    Date and status stay unparsed here so a bad entry is reported on its own
    instead of rejecting the whole batch.
    """

    staff: Optional[str] = None
    staff_id: Optional[str] = Field(None, alias="staffId")
    date: Optional[str] = None
    status: Optional[str] = None
    shift: Optional[str] = None
    remarks: Optional[str] = Field(None, max_length=500)


class BulkAttendanceRequest(CamelModel):
    attendance_records: List[BulkAttendanceEntry] = Field(
        default_factory=list, alias="attendanceRecords"
    )


class UpdateAttendanceRequest(CamelModel):
    status: Optional[AttendanceStatus] = None
    remarks: Optional[str] = Field(None, max_length=500)
