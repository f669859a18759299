"""Leave module test suite — application, validation, scoping, pagination,
owner edits, admin decisions, and per-status stats.

Tests run against SQLite via the shared conftest.py fixtures.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from leave_management.auth.schemas import TokenPayload
from leave_management.common.constants import LeaveStatus, LeaveType, UserRole
from leave_management.common.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from leave_management.leave.schemas import LeaveCreate, LeaveUpdate
from leave_management.leave.service import LeaveService, parse_status_filter
from tests.conftest import TestSessionFactory, headers_for, seed_leave


def _claims(user) -> TokenPayload:
    return TokenPayload(user_id=user.id, email=user.email, role=user.role)


def _leave_payload(**overrides) -> dict:
    payload = {
        "employee_name": "Priya Sharma",
        "leave_type": "Annual",
        "from_date": "2024-07-15",
        "to_date": "2024-07-19",
        "reason": "Family wedding celebration in hometown",
    }
    payload.update(overrides)
    return payload


async def _seed_many(db, user, count: int, status: LeaveStatus = LeaveStatus.pending):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(count):
        await seed_leave(
            db,
            user_id=user.id,
            status=status,
            created_at=base + timedelta(minutes=i),
        )


# ═════════════════════════════════════════════════════════════════════
# Validation
# ═════════════════════════════════════════════════════════════════════


def test_to_date_before_from_date_fails_validation():
    with pytest.raises(ValueError):
        LeaveCreate(**_leave_payload(from_date="2024-07-15", to_date="2024-07-10"))


def test_single_day_leave_is_valid():
    body = LeaveCreate(**_leave_payload(from_date="2024-07-15", to_date="2024-07-15"))
    assert body.from_date == body.to_date == date(2024, 7, 15)


@pytest.mark.parametrize("reason", ["too short", "x" * 501])
def test_reason_length_bounds(reason):
    with pytest.raises(ValueError):
        LeaveCreate(**_leave_payload(reason=reason))


def test_unknown_leave_type_rejected():
    with pytest.raises(ValueError):
        LeaveCreate(**_leave_payload(leave_type="Sabbatical"))


def test_empty_update_rejected():
    with pytest.raises(ValueError):
        LeaveUpdate()


def test_parse_status_filter():
    assert parse_status_filter(None) is None
    assert parse_status_filter("all") is None
    assert parse_status_filter("Approved") == LeaveStatus.approved
    with pytest.raises(ValidationException):
        parse_status_filter("approved")


# ═════════════════════════════════════════════════════════════════════
# POST /apply-leave
# ═════════════════════════════════════════════════════════════════════


async def test_apply_leave_creates_pending_leave(client, employee, employee_headers):
    resp = await client.post(
        "/api/apply-leave", json=_leave_payload(), headers=employee_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "Pending"
    assert data["user_id"] == employee.id
    assert data["leave_type"] == "Annual"
    assert data["from_date"] == "2024-07-15"


async def test_apply_leave_ignores_client_supplied_owner(client, employee, other_employee, employee_headers):
    resp = await client.post(
        "/api/apply-leave",
        json=_leave_payload(user_id=other_employee.id, status="Approved"),
        headers=employee_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["user_id"] == employee.id
    assert resp.json()["status"] == "Pending"


async def test_apply_leave_with_reversed_dates_returns_400(client, employee_headers):
    resp = await client.post(
        "/api/apply-leave",
        json=_leave_payload(from_date="2024-07-15", to_date="2024-07-10"),
        headers=employee_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["errors"]


async def test_apply_leave_missing_reason_returns_400(client, employee_headers):
    payload = _leave_payload()
    del payload["reason"]
    resp = await client.post("/api/apply-leave", json=payload, headers=employee_headers)
    assert resp.status_code == 400
    assert "reason" in resp.json()["errors"]


async def test_apply_leave_requires_token(client):
    resp = await client.post("/api/apply-leave", json=_leave_payload())
    assert resp.status_code == 401


# ═════════════════════════════════════════════════════════════════════
# GET /leaves — scoping, filtering, pagination
# ═════════════════════════════════════════════════════════════════════


async def test_employee_sees_only_own_leaves(
    client, db, employee, other_employee, employee_headers,
):
    await _seed_many(db, employee, 2)
    await _seed_many(db, other_employee, 3)

    resp = await client.get("/api/leaves", headers=employee_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["totalCount"] == 2
    assert {lv["user_id"] for lv in data["leaves"]} == {employee.id}


async def test_admin_sees_all_leaves(
    client, db, employee, other_employee, admin_headers,
):
    await _seed_many(db, employee, 2)
    await _seed_many(db, other_employee, 3)

    resp = await client.get("/api/leaves", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["totalCount"] == 5


async def test_pagination_second_page(client, db, employee, admin_headers):
    await _seed_many(db, employee, 25)

    resp = await client.get("/api/leaves?page=2&limit=10", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["leaves"]) == 10
    assert data["totalCount"] == 25
    assert data["totalPages"] == 3
    assert data["currentPage"] == 2
    assert data["limit"] == 10


async def test_pagination_last_partial_page_newest_first(client, db, employee, admin_headers):
    await _seed_many(db, employee, 25)

    first = (await client.get("/api/leaves?page=1&limit=10", headers=admin_headers)).json()
    last = (await client.get("/api/leaves?page=3&limit=10", headers=admin_headers)).json()
    assert len(last["leaves"]) == 5
    assert first["leaves"][0]["id"] > first["leaves"][-1]["id"]
    assert first["leaves"][0]["created_at"] >= last["leaves"][-1]["created_at"]


async def test_pagination_defaults(client, db, employee, employee_headers):
    await _seed_many(db, employee, 12)

    data = (await client.get("/api/leaves", headers=employee_headers)).json()
    assert data["currentPage"] == 1
    assert data["limit"] == 10
    assert len(data["leaves"]) == 10
    assert data["totalPages"] == 2


async def test_empty_result_has_zero_pages(client, employee_headers):
    data = (await client.get("/api/leaves", headers=employee_headers)).json()
    assert data == {
        "leaves": [],
        "totalCount": 0,
        "currentPage": 1,
        "totalPages": 0,
        "limit": 10,
    }


@pytest.mark.parametrize("query", ["page=0", "limit=0", "limit=101", "status=Cancelled"])
async def test_invalid_list_query_returns_400(client, employee_headers, query):
    resp = await client.get(f"/api/leaves?{query}", headers=employee_headers)
    assert resp.status_code == 400


async def test_status_filter(client, db, employee, admin_headers):
    await _seed_many(db, employee, 3, LeaveStatus.pending)
    await _seed_many(db, employee, 2, LeaveStatus.approved)
    await _seed_many(db, employee, 1, LeaveStatus.rejected)

    approved = (await client.get("/api/leaves?status=Approved", headers=admin_headers)).json()
    assert approved["totalCount"] == 2
    assert {lv["status"] for lv in approved["leaves"]} == {"Approved"}

    everything = (await client.get("/api/leaves?status=all", headers=admin_headers)).json()
    assert everything["totalCount"] == 6


async def test_employee_status_filter_stays_in_scope(
    client, db, employee, other_employee, employee_headers,
):
    await _seed_many(db, employee, 1, LeaveStatus.approved)
    await _seed_many(db, other_employee, 4, LeaveStatus.approved)

    data = (await client.get("/api/leaves?status=Approved", headers=employee_headers)).json()
    assert data["totalCount"] == 1


# ═════════════════════════════════════════════════════════════════════
# Service-level pagination clamping
# ═════════════════════════════════════════════════════════════════════


async def test_service_clamps_page_and_limit(db, employee):
    await _seed_many(db, employee, 5)

    page = await LeaveService.get_all_leaves(db, page=-3, limit=500)
    assert page.current_page == 1
    assert page.limit == 100
    assert page.total_count == 5

    page = await LeaveService.get_user_leaves(db, employee.id, page=1, limit=0)
    assert page.limit == 1
    assert page.total_pages == 5
    assert len(page.leaves) == 1


async def test_get_leaves_by_status_newest_first(db, employee):
    await _seed_many(db, employee, 3, LeaveStatus.rejected)
    await _seed_many(db, employee, 2, LeaveStatus.pending)

    rejected = await LeaveService.get_leaves_by_status(db, LeaveStatus.rejected)
    assert len(rejected) == 3
    assert all(lv.status == LeaveStatus.rejected for lv in rejected)
    assert rejected[0].created_at >= rejected[-1].created_at


# ═════════════════════════════════════════════════════════════════════
# GET /leaves/{id}
# ═════════════════════════════════════════════════════════════════════


async def test_owner_can_view_leave(client, db, employee, employee_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.get(f"/api/leaves/{leave.id}", headers=employee_headers)
    assert resp.status_code == 200
    assert resp.json()["id"] == leave.id


async def test_other_employee_cannot_view_leave(client, db, employee, other_employee):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.get(f"/api/leaves/{leave.id}", headers=headers_for(other_employee))
    assert resp.status_code == 403


async def test_admin_can_view_any_leave(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.get(f"/api/leaves/{leave.id}", headers=admin_headers)
    assert resp.status_code == 200


async def test_missing_leave_returns_404(client, employee_headers):
    resp = await client.get("/api/leaves/4242", headers=employee_headers)
    assert resp.status_code == 404


async def test_non_numeric_leave_id_returns_400(client, employee_headers):
    resp = await client.get("/api/leaves/abc", headers=employee_headers)
    assert resp.status_code == 400


# ═════════════════════════════════════════════════════════════════════
# PUT /leaves/{id} — owner edits
# ═════════════════════════════════════════════════════════════════════


async def test_owner_edits_pending_leave(client, db, employee, employee_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.put(
        f"/api/leaves/{leave.id}",
        json={"leave_type": "Sick", "to_date": "2024-07-20"},
        headers=employee_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["leave_type"] == "Sick"
    assert data["to_date"] == "2024-07-20"
    assert data["from_date"] == "2024-07-15"
    assert data["status"] == "Pending"


async def test_editing_non_pending_leave_returns_400(client, db, employee, employee_headers):
    leave = await seed_leave(db, user_id=employee.id, status=LeaveStatus.approved)
    resp = await client.put(
        f"/api/leaves/{leave.id}",
        json={"reason": "Changed my plans for the trip"},
        headers=employee_headers,
    )
    assert resp.status_code == 400
    assert "status" in resp.json()["errors"]


async def test_edit_that_reverses_dates_returns_400(client, db, employee, employee_headers):
    leave = await seed_leave(
        db, user_id=employee.id, from_date=date(2024, 7, 15), to_date=date(2024, 7, 19),
    )
    resp = await client.put(
        f"/api/leaves/{leave.id}",
        json={"from_date": "2024-07-25"},
        headers=employee_headers,
    )
    assert resp.status_code == 400
    assert "to_date" in resp.json()["errors"]


async def test_non_owner_cannot_edit(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.put(
        f"/api/leaves/{leave.id}",
        json={"reason": "Admin trying to rewrite this"},
        headers=admin_headers,
    )
    assert resp.status_code == 403


async def test_update_leave_service_bumps_updated_at(db, employee):
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    leave = await seed_leave(db, user_id=employee.id, created_at=stamp)

    updated = await LeaveService.update_leave(
        db, leave.id, _claims(employee), LeaveUpdate(employee_name="Priya S."),
    )
    assert updated.employee_name == "Priya S."
    assert updated.updated_at.replace(tzinfo=None) > stamp.replace(tzinfo=None)


# ═════════════════════════════════════════════════════════════════════
# Admin decisions
# ═════════════════════════════════════════════════════════════════════


async def test_approve_pending_leave(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.put(f"/api/leaves/{leave.id}/approve", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "Approved"


async def test_approve_bumps_updated_at(db, employee):
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    leave = await seed_leave(db, user_id=employee.id, created_at=stamp)

    approved = await LeaveService.approve_leave(db, leave.id)
    assert approved.status == LeaveStatus.approved
    assert approved.updated_at.replace(tzinfo=None) > stamp.replace(tzinfo=None)


async def test_approving_twice_is_idempotent(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id)
    first = await client.put(f"/api/leaves/{leave.id}/approve", headers=admin_headers)
    second = await client.put(f"/api/leaves/{leave.id}/approve", headers=admin_headers)
    assert first.status_code == second.status_code == 200
    assert second.json()["status"] == "Approved"
    assert second.json()["updated_at"] == first.json()["updated_at"]


async def test_setting_pending_on_pending_leave_is_a_no_op(client, db, employee, admin_headers):
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    leave = await seed_leave(db, user_id=employee.id, created_at=stamp)

    resp = await client.put(
        f"/api/leaves/{leave.id}/status",
        json={"status": "Pending"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "Pending"
    assert data["updated_at"].startswith("2024-01-01T00:00:00")


async def test_reject_pending_leave(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.put(f"/api/leaves/{leave.id}/reject", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "Rejected"


async def test_rejecting_approved_leave_returns_400(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id, status=LeaveStatus.approved)
    resp = await client.put(f"/api/leaves/{leave.id}/reject", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["errors"]["status"] == ["Leave request is already Approved."]


async def test_set_status_endpoint(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.put(
        f"/api/leaves/{leave.id}/status",
        json={"status": "Rejected"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "Rejected"


async def test_set_status_invalid_value_returns_400(client, db, employee, admin_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.put(
        f"/api/leaves/{leave.id}/status",
        json={"status": "Cancelled"},
        headers=admin_headers,
    )
    assert resp.status_code == 400


async def test_decision_on_missing_leave_returns_404(client, admin_headers):
    resp = await client.put("/api/leaves/999/approve", headers=admin_headers)
    assert resp.status_code == 404


async def test_employee_cannot_reject(client, db, employee, employee_headers):
    leave = await seed_leave(db, user_id=employee.id)
    resp = await client.put(f"/api/leaves/{leave.id}/reject", headers=employee_headers)
    assert resp.status_code == 403

    async with TestSessionFactory() as session:
        stored = await LeaveService.get_leave(
            session, leave.id, TokenPayload(user_id=0, email="a@company.com", role=UserRole.admin),
        )
    assert stored.status == LeaveStatus.pending


async def test_first_decision_wins(db, employee):
    leave = await seed_leave(db, user_id=employee.id)

    await LeaveService.reject_leave(db, leave.id)
    with pytest.raises(ValidationException):
        await LeaveService.approve_leave(db, leave.id)


async def test_service_errors(db, employee, other_employee):
    leave = await seed_leave(db, user_id=employee.id)

    with pytest.raises(NotFoundException):
        await LeaveService.update_leave_status(db, 12345, LeaveStatus.approved)
    with pytest.raises(ForbiddenException):
        await LeaveService.get_leave(db, leave.id, _claims(other_employee))


# ═════════════════════════════════════════════════════════════════════
# GET /leaves/stats
# ═════════════════════════════════════════════════════════════════════


async def test_stats_scoped_by_role(
    client, db, employee, other_employee, employee_headers, admin_headers,
):
    await _seed_many(db, employee, 2, LeaveStatus.pending)
    await _seed_many(db, employee, 1, LeaveStatus.approved)
    await _seed_many(db, other_employee, 3, LeaveStatus.rejected)

    own = (await client.get("/api/leaves/stats", headers=employee_headers)).json()
    assert own == {"pending": 2, "approved": 1, "rejected": 0, "total": 3}

    everyone = (await client.get("/api/leaves/stats", headers=admin_headers)).json()
    assert everyone == {"pending": 2, "approved": 1, "rejected": 3, "total": 6}


async def test_create_leave_service(db, employee):
    body = LeaveCreate(**_leave_payload(leave_type="Emergency"))
    created = await LeaveService.create_leave(db, employee.id, body)
    assert created.id is not None
    assert created.leave_type == LeaveType.emergency
    assert created.status == LeaveStatus.pending
