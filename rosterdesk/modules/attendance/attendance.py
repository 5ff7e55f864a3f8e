"""
Attendance Module for Rosterdesk API.

One record per staff member per day. Marking the same staff member on the
same date again updates the existing record instead of adding a second one.
"""

import logging
from collections import Counter
from dataclasses import asdict, dataclass
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..staff import StaffModule
from ..storage import DocumentStore, RecordNotFoundError, new_id

logger = logging.getLogger("rosterdesk.attendance")


class AttendanceStatus(str, Enum):
    """Daily attendance outcome."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LEAVE = "Leave"
    HALF_DAY = "Half-Day"


class StaffNotFoundError(LookupError):
    """Attendance referenced a staff member that does not exist."""

    def __init__(self, reference: str):
        super().__init__(f"Staff not found: {reference}")
        self.reference = reference


@dataclass
class AttendanceRecord:
    """A staff member's attendance on one date."""

    _id: str
    staff: str
    staffId: str
    staffName: str
    date: str
    shift: str
    status: str
    remarks: str
    markedBy: Optional[str]
    createdAt: str
    updatedAt: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "AttendanceRecord":
        return cls(
            _id=doc["_id"],
            staff=doc.get("staff", ""),
            staffId=doc.get("staffId", ""),
            staffName=doc.get("staffName", ""),
            date=doc.get("date", ""),
            shift=doc.get("shift", ""),
            status=doc.get("status", ""),
            remarks=doc.get("remarks", ""),
            markedBy=doc.get("markedBy"),
            createdAt=doc.get("createdAt", ""),
            updatedAt=doc.get("updatedAt", ""),
        )


def parse_day(value: Any) -> str:
    """Normalise a date (date object or YYYY-MM-DD string) to ISO text."""
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Please provide a date (YYYY-MM-DD)")
    try:
        return date.fromisoformat(value.strip()[:10]).isoformat()
    except ValueError:
        raise ValueError(f"Invalid date: {value}") from None


def parse_status(value: Any) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValueError(f"Invalid status '{value}'. Allowed: {allowed}") from None


def _day_key(staff_record_id: str, day: str) -> str:
    return f"{staff_record_id}:{day}"


class AttendanceModule:
    """
    Marks and queries attendance.

    Records are keyed uniquely on (staff record id, date) through the
    ``staffDay`` field. The stored ``staffId``/``staffName`` are a snapshot;
    reads fill them from the current staff record.
    """

    UNIQUE_FIELDS = ("staffDay",)

    def __init__(self, store: DocumentStore, staff: StaffModule):
        """
        Initialize attendance module.

        Args:
            store: Document store for attendance (unique staffDay)
            staff: Staff module used to resolve staff references
        """
        self.store = store
        self.staff = staff

    async def mark(
        self,
        staff_ref: str,
        day: Any,
        status: Any,
        remarks: Optional[str] = None,
        shift: Optional[str] = None,
        marked_by: Optional[str] = None,
    ) -> Tuple[AttendanceRecord, bool]:
        """
        Mark attendance, updating the day's record if one exists.

        Args:
            staff_ref: Staff record id or staffId
            day: Date of attendance
            status: One of AttendanceStatus
            remarks: Free text
            shift: Shift worked (defaults to the staff member's shift)
            marked_by: Principal id of the user marking

        Returns:
            (record, created) where created is False for an update

        Raises:
            StaffNotFoundError: If staff_ref matches nobody
            ValueError: Missing staff reference, invalid date or status
        """
        if not staff_ref:
            raise ValueError("Please provide a staff member")
        day = parse_day(day)
        status = parse_status(status)

        member = await self.staff.resolve(staff_ref)
        if member is None:
            raise StaffNotFoundError(staff_ref)

        now = datetime.now(UTC).isoformat()
        key = _day_key(member._id, day)
        existing = await self.store.find_one("staffDay", key)

        if existing:
            changes = {
                "status": status.value,
                "remarks": (remarks or "").strip() or existing.get("remarks", ""),
                "shift": (shift or "").strip() or existing.get("shift", member.shift),
                "markedBy": marked_by or existing.get("markedBy"),
                "staffId": member.staffId,
                "staffName": member.name,
                "updatedAt": now,
            }
            doc = await self.store.update(existing["_id"], changes)
            logger.info(f"Attendance updated for {member.staffId} on {day}")
            return AttendanceRecord.from_document(doc), False

        doc = await self.store.insert({
            "_id": new_id(),
            "staffDay": key,
            "staff": member._id,
            "staffId": member.staffId,
            "staffName": member.name,
            "date": day,
            "shift": (shift or "").strip() or member.shift,
            "status": status.value,
            "remarks": (remarks or "").strip(),
            "markedBy": marked_by,
            "createdAt": now,
            "updatedAt": now,
        })
        logger.info(f"Attendance marked for {member.staffId} on {day}: {status.value}")
        return AttendanceRecord.from_document(doc), True

    async def mark_bulk(
        self, entries: List[Dict[str, Any]], marked_by: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Mark many attendance entries; one bad entry does not stop the rest.

        Returns:
            {"marked": [records], "errors": [{"index", "staff", "error"}]}

        Raises:
            ValueError: If entries is empty
        """
        if not entries:
            raise ValueError("Please provide attendance records")

        marked, errors = [], []
        for index, entry in enumerate(entries):
            staff_ref = entry.get("staff") or entry.get("staffId")
            try:
                record, _ = await self.mark(
                    staff_ref,
                    entry.get("date"),
                    entry.get("status"),
                    remarks=entry.get("remarks"),
                    shift=entry.get("shift"),
                    marked_by=marked_by,
                )
            except (StaffNotFoundError, ValueError) as e:
                errors.append({"index": index, "staff": staff_ref, "error": str(e)})
                continue
            marked.append(record)

        return {"marked": marked, "errors": errors}

    async def list(
        self,
        day: Optional[Any] = None,
        shift: Optional[str] = None,
        staff_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Filter attendance records and group them by shift.

        Returns:
            {"records": [...], "grouped": {shift: [...]}}
        """
        wanted_day = parse_day(day) if day else None
        wanted_status = parse_status(status).value if status else None

        wanted_staff = None
        if staff_id:
            member = await self.staff.resolve(staff_id)
            if member is None:
                return {"records": [], "grouped": {}}
            wanted_staff = member._id

        docs = []
        for doc in await self.store.list():
            if wanted_day and doc.get("date") != wanted_day:
                continue
            if shift and doc.get("shift") != shift:
                continue
            if wanted_staff and doc.get("staff") != wanted_staff:
                continue
            if wanted_status and doc.get("status") != wanted_status:
                continue
            docs.append(doc)

        records = await self._with_current_staff(docs)
        records.sort(key=lambda r: (r.date, r.staffName), reverse=True)
        grouped: Dict[str, List[AttendanceRecord]] = {}
        for record in records:
            grouped.setdefault(record.shift, []).append(record)

        return {"records": records, "grouped": grouped}

    async def history(
        self,
        staff_ref: str,
        start: Optional[Any] = None,
        end: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """
        Attendance history for one staff member with per-status counts.

        Raises:
            StaffNotFoundError: If staff_ref matches nobody
        """
        member = await self.staff.resolve(staff_ref)
        if member is None:
            raise StaffNotFoundError(staff_ref)

        start_day = parse_day(start) if start else None
        end_day = parse_day(end) if end else None

        docs = [
            d
            for d in await self.store.list()
            if d.get("staff") == member._id
            and (start_day is None or d.get("date", "") >= start_day)
            and (end_day is None or d.get("date", "") <= end_day)
        ]
        records = [
            AttendanceRecord.from_document({**d, "staffId": member.staffId, "staffName": member.name})
            for d in docs
        ]
        records.sort(key=lambda r: r.date, reverse=True)

        counts = Counter(r.status for r in records)
        total = len(records)
        attended = counts[AttendanceStatus.PRESENT.value] + 0.5 * counts[AttendanceStatus.HALF_DAY.value]
        stats = {
            "total": total,
            **{s.value: counts[s.value] for s in AttendanceStatus},
            "attendanceRate": round(attended / total * 100, 2) if total else 0.0,
        }

        return {"staff": member, "records": records, "stats": stats}

    async def update(
        self, record_id: str, status: Optional[str] = None, remarks: Optional[str] = None
    ) -> AttendanceRecord:
        """
        Change status and/or remarks of a record.

        Raises:
            RecordNotFoundError: If the record does not exist
        """
        changes: Dict[str, Any] = {}
        if status is not None:
            changes["status"] = parse_status(status).value
        if remarks is not None:
            changes["remarks"] = remarks.strip()

        if not changes:
            doc = await self.store.get(record_id)
            if doc is None:
                raise RecordNotFoundError(self.store.collection, record_id)
        else:
            changes["updatedAt"] = datetime.now(UTC).isoformat()
            doc = await self.store.update(record_id, changes)

        records = await self._with_current_staff([doc])
        return records[0]

    async def delete(self, record_id: str) -> None:
        await self.store.delete(record_id)
        logger.info(f"Attendance deleted: {record_id}")

    async def _with_current_staff(self, docs: List[Dict[str, Any]]) -> List[AttendanceRecord]:
        """Build records, taking staffId/staffName from the live staff records."""
        members = {m._id: m for m in await self.staff.list_staff()}
        records = []
        for doc in docs:
            member = members.get(doc.get("staff"))
            if member is not None:
                doc = {**doc, "staffId": member.staffId, "staffName": member.name}
            records.append(AttendanceRecord.from_document(doc))
        return records
