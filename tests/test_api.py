import pytest
from datetime import timedelta

from orgauth.core.security import create_access_token


@pytest.mark.asyncio
async def test_root_health_check(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_routes_require_auth(client):
    for path in ("/api/employees", "/api/employees/scope", "/api/employees/1", "/api/trainings/1/eligibility"):
        res = await client.get(path)
        assert res.status_code in (401, 403)

    res = await client.post("/api/approvals/resolve", json={"requester_employee_id": 1, "steps": []})
    assert res.status_code in (401, 403)


@pytest.mark.asyncio
async def test_invalid_and_expired_tokens_are_rejected(client, org):
    res = await client.get("/api/employees", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401

    expired = create_access_token(org.dean_user.id, expires_delta=timedelta(minutes=-5))
    res = await client.get("/api/employees", headers={"Authorization": f"Bearer {expired}"})
    assert res.status_code == 401

    ghost = create_access_token(999999)
    res = await client.get("/api/employees", headers={"Authorization": f"Bearer {ghost}"})
    assert res.status_code == 401


# ------------------------------------------------------------
# EMPLOYEES
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_employees_is_scoped(client, org, auth_headers):
    res = await client.get("/api/employees", headers=auth_headers(org.lecturer_user))
    assert res.status_code == 200
    assert [e["id"] for e in res.json()] == [org.lecturer.id]

    res = await client.get("/api/employees", headers=auth_headers(org.head_user))
    assert {e["id"] for e in res.json()} == {
        org.lecturer.id, org.lecturer2.id, org.professor.id, org.head.id
    }

    res = await client.get("/api/employees", headers=auth_headers(org.admin_user))
    assert len(res.json()) == 10


@pytest.mark.asyncio
async def test_my_scope(client, org, auth_headers):
    res = await client.get("/api/employees/scope", headers=auth_headers(org.dean_user))
    assert res.status_code == 200
    assert res.json() == {
        "kind": "faculty",
        "manageable_department_ids": [org.X.id],
        "manageable_faculty_ids": [org.F.id],
    }

    res = await client.get("/api/employees/scope", headers=auth_headers(org.admin_user))
    assert res.json()["kind"] == "all"
    assert res.json()["manageable_department_ids"] is None


@pytest.mark.asyncio
async def test_read_employee(client, org, auth_headers):
    headers = auth_headers(org.dean_user)

    res = await client.get(f"/api/employees/{org.professor.id}", headers=headers)
    assert res.status_code == 200
    assert res.json()["first_name"] == "Petra"

    res = await client.get(f"/api/employees/{org.admin_officer.id}", headers=headers)
    assert res.status_code == 403

    res = await client.get("/api/employees/999999", headers=headers)
    assert res.status_code == 404


# ------------------------------------------------------------
# TRAININGS
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_training_eligibility(client, build, org, auth_headers):
    training = await build.training(capacity=2, faculties=[org.F])
    await build.application(training, org.professor)

    res = await client.get(
        f"/api/trainings/{training.id}/eligibility", headers=auth_headers(org.lecturer_user)
    )
    assert res.status_code == 200
    body = res.json()
    assert body["is_eligible"] is True
    assert body["has_capacity"] is True
    assert body["available_spots"] == 1
    assert body["decision"]["allowed"] is True

    res = await client.get(
        f"/api/trainings/{training.id}/eligibility", headers=auth_headers(org.physicist_user)
    )
    body = res.json()
    assert body["is_eligible"] is False
    assert body["decision"]["reason"] == "not_eligible"


@pytest.mark.asyncio
async def test_training_eligibility_errors(client, org, auth_headers):
    res = await client.get("/api/trainings/999/eligibility", headers=auth_headers(org.lecturer_user))
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_training_eligibility_needs_employee_record(client, build, org, auth_headers):
    training = await build.training()
    res = await client.get(
        f"/api/trainings/{training.id}/eligibility", headers=auth_headers(org.admin_user)
    )
    assert res.status_code == 400


# ------------------------------------------------------------
# APPROVAL PREVIEW
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_resolve_preview(client, org, auth_headers):
    payload = {
        "requester_employee_id": org.lecturer.id,
        "steps": [
            {
                "name": "Department",
                "approvers": [
                    {"type": "position", "position_id": org.head_pos.id},
                    {"type": "user", "user_id": org.head_user.id},
                ],
            },
            {
                "name": "Self check",
                "approvers": [{"type": "user", "user_id": org.lecturer_user.id}],
            },
        ],
    }
    res = await client.post("/api/approvals/resolve", json=payload, headers=auth_headers(org.admin_user))
    assert res.status_code == 200
    body = res.json()

    department, self_check = body["steps"]
    assert department["approvers"] == [
        {
            "type": "user",
            "user_id": org.head_user.id,
            "resolved_from": "position",
            "source_role_id": None,
            "source_position_id": org.head_pos.id,
            "escalated": False,
            "original_reference": None,
        }
    ]
    assert self_check["approvers"][0]["user_id"] == org.professor_user.id
    assert self_check["approvers"][0]["escalated"] is True

    assert [a["approver_id"] for a in body["actions"]] == [org.head_user.id, org.professor_user.id]
    assert all(a["status"] == "pending" for a in body["actions"])


@pytest.mark.asyncio
async def test_resolve_preview_with_training_restrictions(client, build, org, auth_headers):
    training = await build.training(faculties=[org.G])
    payload = {
        "requester_employee_id": org.lecturer.id,
        "training_id": training.id,
        "steps": [{"name": "Head", "approvers": [{"type": "position", "position_id": org.head_pos.id}]}],
    }
    res = await client.post("/api/approvals/resolve", json=payload, headers=auth_headers(org.admin_user))
    assert res.status_code == 200
    step = res.json()["steps"][0]
    assert step["approvers"] == []
    assert step["needs_attention"] is True


@pytest.mark.asyncio
async def test_resolve_preview_is_admin_only(client, org, auth_headers):
    payload = {"requester_employee_id": org.lecturer.id, "steps": []}
    res = await client.post("/api/approvals/resolve", json=payload, headers=auth_headers(org.dean_user))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_resolve_preview_validation(client, org, auth_headers):
    headers = auth_headers(org.admin_user)

    res = await client.post(
        "/api/approvals/resolve",
        json={"requester_employee_id": org.lecturer.id, "steps": [{"name": "Bad", "approvers": [{"type": "group", "id": 1}]}]},
        headers=headers,
    )
    assert res.status_code == 422

    res = await client.post(
        "/api/approvals/resolve", json={"requester_employee_id": 999999, "steps": []}, headers=headers
    )
    assert res.status_code == 404

    res = await client.post(
        "/api/approvals/resolve",
        json={"requester_employee_id": org.lecturer.id, "training_id": 999999, "steps": []},
        headers=headers,
    )
    assert res.status_code == 404
