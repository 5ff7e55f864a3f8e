"""
Attendance Module - Black Box Interface

Purpose: Daily attendance per staff member
Interface: mark(), mark_bulk(), list(), history(), update(), delete()
Hidden: One-record-per-day keying, filtering, statistics
"""

from .attendance import (
    AttendanceModule,
    AttendanceRecord,
    AttendanceStatus,
    StaffNotFoundError,
)

__all__ = [
    "AttendanceModule",
    "AttendanceRecord",
    "AttendanceStatus",
    "StaffNotFoundError",
]
