"""
Rosterdesk - Staff Shift Scheduling & Attendance Tracker

A record-keeping backend for staff scheduling and daily attendance.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- auth: Password hashing, session tokens and the access gate
- middleware: HTTP adapter that enforces the access gate
- users: Identity records
- staff: Staff records
- attendance: Daily attendance records
- storage: Document persistence abstraction
- api: Request/response models
"""

__version__ = "1.0.0"
