from datetime import date

import pytest

from rosterdesk.modules.attendance import AttendanceStatus, StaffNotFoundError
from rosterdesk.modules.storage import RecordNotFoundError


async def add_staff(staff_module, name="Jane", staff_id="S001", shift="Morning"):
    return await staff_module.create_staff(name, staff_id, "Nurse", shift)


@pytest.mark.asyncio
async def test_mark_creates_record(attendance_module, staff_module):
    member = await add_staff(staff_module)

    record, created = await attendance_module.mark("S001", "2026-03-02", "Present", marked_by="u1")

    assert created is True
    assert record.staff == member._id
    assert record.staffName == "Jane"
    assert record.date == "2026-03-02"
    assert record.shift == "Morning"
    assert record.status == "Present"
    assert record.markedBy == "u1"


@pytest.mark.asyncio
async def test_mark_same_day_updates(attendance_module, staff_module):
    member = await add_staff(staff_module)
    first, _ = await attendance_module.mark(member._id, date(2026, 3, 2), "Present")

    second, created = await attendance_module.mark("S001", "2026-03-02", AttendanceStatus.LEAVE, remarks="sick")

    assert created is False
    assert second._id == first._id
    assert second.status == "Leave"
    assert second.remarks == "sick"
    assert len((await attendance_module.list())["records"]) == 1


@pytest.mark.asyncio
async def test_mark_unknown_staff(attendance_module):
    with pytest.raises(StaffNotFoundError):
        await attendance_module.mark("S404", "2026-03-02", "Present")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "staff_ref,day,status",
    [(None, "2026-03-02", "Present"), ("S001", "not-a-date", "Present"), ("S001", "2026-03-02", "Late")],
)
async def test_mark_invalid_input(attendance_module, staff_module, staff_ref, day, status):
    await add_staff(staff_module)

    with pytest.raises(ValueError):
        await attendance_module.mark(staff_ref, day, status)


@pytest.mark.asyncio
async def test_mark_bulk_collects_errors(attendance_module, staff_module):
    await add_staff(staff_module)
    await add_staff(staff_module, name="John", staff_id="S002", shift="Night")

    result = await attendance_module.mark_bulk([
        {"staff": "S001", "date": "2026-03-02", "status": "Present"},
        {"staffId": "S404", "date": "2026-03-02", "status": "Present"},
        {"staff": "S002", "date": "2026-03-02", "status": "Half-Day"},
    ])

    assert [r.staffId for r in result["marked"]] == ["S001", "S002"]
    assert result["errors"] == [
        {"index": 1, "staff": "S404", "error": "Staff not found: S404"}
    ]


@pytest.mark.asyncio
async def test_mark_bulk_empty(attendance_module):
    with pytest.raises(ValueError):
        await attendance_module.mark_bulk([])


@pytest.mark.asyncio
async def test_list_filters_and_groups_by_shift(attendance_module, staff_module):
    await add_staff(staff_module)
    await add_staff(staff_module, name="John", staff_id="S002", shift="Night")
    await attendance_module.mark("S001", "2026-03-02", "Present")
    await attendance_module.mark("S002", "2026-03-02", "Absent")
    await attendance_module.mark("S001", "2026-03-03", "Present")

    day = await attendance_module.list(day="2026-03-02")
    assert len(day["records"]) == 2
    assert set(day["grouped"]) == {"Morning", "Night"}

    absent = await attendance_module.list(status="Absent")
    assert [r.staffId for r in absent["records"]] == ["S002"]

    by_staff = await attendance_module.list(staff_id="S001")
    assert [r.date for r in by_staff["records"]] == ["2026-03-03", "2026-03-02"]


@pytest.mark.asyncio
async def test_history_stats(attendance_module, staff_module):
    await add_staff(staff_module)
    for day, status in [
        ("2026-03-01", "Present"),
        ("2026-03-02", "Half-Day"),
        ("2026-03-03", "Absent"),
        ("2026-03-04", "Present"),
        ("2026-04-01", "Leave"),
    ]:
        await attendance_module.mark("S001", day, status)

    result = await attendance_module.history("S001", start="2026-03-01", end="2026-03-31")

    assert result["staff"].staffId == "S001"
    assert len(result["records"]) == 4
    stats = result["stats"]
    assert stats["total"] == 4
    assert stats["Present"] == 2
    assert stats["Half-Day"] == 1
    assert stats["Absent"] == 1
    assert stats["Leave"] == 0
    assert stats["attendanceRate"] == 62.5


@pytest.mark.asyncio
async def test_history_empty_rate_is_zero(attendance_module, staff_module):
    await add_staff(staff_module)

    result = await attendance_module.history("S001")

    assert result["stats"]["total"] == 0
    assert result["stats"]["attendanceRate"] == 0.0


@pytest.mark.asyncio
async def test_history_unknown_staff(attendance_module):
    with pytest.raises(StaffNotFoundError):
        await attendance_module.history("S404")


@pytest.mark.asyncio
async def test_update_and_delete(attendance_module, staff_module):
    await add_staff(staff_module)
    record, _ = await attendance_module.mark("S001", "2026-03-02", "Present")

    updated = await attendance_module.update(record._id, status="Absent", remarks=" late call ")
    assert updated.status == "Absent"
    assert updated.remarks == "late call"

    await attendance_module.delete(record._id)
    with pytest.raises(RecordNotFoundError):
        await attendance_module.update(record._id)


@pytest.mark.asyncio
async def test_delete_frees_day_for_new_record(attendance_module, staff_module):
    await add_staff(staff_module)
    record, _ = await attendance_module.mark("S001", "2026-03-02", "Present")
    await attendance_module.delete(record._id)

    again, created = await attendance_module.mark("S001", "2026-03-02", "Absent")

    assert created is True
    assert again._id != record._id


@pytest.mark.asyncio
async def test_reads_use_current_staff_details(attendance_module, staff_module):
    member = await add_staff(staff_module)
    record, _ = await attendance_module.mark("S001", "2026-03-02", "Present")

    await staff_module.update_staff(member._id, {"staffId": "S100", "name": "Janet"})

    listed = (await attendance_module.list(staff_id="S100"))["records"]
    assert [(r.staffId, r.staffName) for r in listed] == [("S100", "Janet")]
    assert (await attendance_module.list(staff_id="S001"))["records"] == []

    history = await attendance_module.history(member._id)
    assert history["records"][0].staffName == "Janet"

    updated = await attendance_module.update(record._id, status="Absent")
    assert updated.staffId == "S100"


@pytest.mark.asyncio
async def test_remark_refreshes_stored_staff_snapshot(attendance_module, staff_module):
    member = await add_staff(staff_module)
    record, _ = await attendance_module.mark("S001", "2026-03-02", "Present")
    await staff_module.update_staff(member._id, {"name": "Janet"})

    await attendance_module.mark(member._id, "2026-03-02", "Leave")

    stored = await attendance_module.store.get(record._id)
    assert stored["staffName"] == "Janet"
