# tests/api_contract/test_api_transfers.py
"""
Transfer endpoints: two-stage approval over HTTP.
"""

from __future__ import annotations

from tests.factories import make_assignment, make_profile, make_task, make_transfer, make_workflow


def _hdr(actor) -> dict[str, str]:
    return {"X-Actor-User-Id": str(actor.id)}


def _setup(api_db):
    x = make_profile(api_db, name="X")
    y = make_profile(api_db, name="Y")
    m = make_profile(api_db, name="M", role="ordering_manager")
    t = make_task(api_db)
    wf = make_workflow(api_db, tasks=[(t, True)])
    a = make_assignment(api_db, workflow=wf, assigned_to=x)
    api_db.commit()
    return x, y, m, a


def _request(client, a, frm, to, reason="going on break"):
    return client.post(
        "/task-transfers",
        json={"assignment_id": str(a.id), "to_user_id": str(to.id), "reason": reason},
        headers=_hdr(frm),
    )


def test_full_chain_over_http(client, api_db):
    x, y, m, a = _setup(api_db)

    r = _request(client, a, x, y)
    assert r.status_code == 201, r.text
    tr = r.json()
    assert tr["status"] == "pending_transferee"
    assert tr["transfer_reason"] == "going on break"
    assert tr["row_version"] == 1

    r = client.post(
        f"/task-transfers/{tr['id']}/responses",
        json={"stage": "transferee", "approve": True, "expected_row_version": 1},
        headers=_hdr(y),
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "pending_manager"

    # manager inbox
    r = client.get("/task-transfers", headers=_hdr(m))
    assert [t["id"] for t in r.json()] == [tr["id"]]

    r = client.post(
        f"/task-transfers/{tr['id']}/responses",
        json={"stage": "manager", "approve": True, "response_text": "ok"},
        headers=_hdr(m),
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "approved"
    assert r.json()["manager_id"] == str(m.id)

    r = client.get(f"/workflow-assignments/{a.id}", headers=_hdr(y))
    assert r.status_code == 200, r.text
    assert r.json()["assigned_to"] == str(y.id)
    assert r.json()["status"] == "pending"

    r = client.get(f"/task-transfers/{tr['id']}/events", headers=_hdr(x))
    assert [e["action"] for e in r.json()] == ["request", "transferee_approve", "manager_approve"]


def test_self_transfer_is_400(client, api_db):
    x, _, _, a = _setup(api_db)

    r = _request(client, a, x, x)
    assert r.status_code == 400, r.text
    assert r.json()["kind"] == "invalid_request"


def test_not_owner_is_403(client, api_db):
    x, y, m, a = _setup(api_db)

    r = _request(client, a, y, m)
    assert r.status_code == 403, r.text


def test_second_active_request_is_409(client, api_db):
    x, y, m, a = _setup(api_db)

    assert _request(client, a, x, y).status_code == 201
    r = _request(client, a, x, m)
    assert r.status_code == 409, r.text
    assert r.json()["kind"] == "conflict"


def test_rejected_transfer_stays_rejected(client, api_db):
    x, y, m, a = _setup(api_db)
    tr = make_transfer(api_db, assignment=a, from_user=x, to_user=y, status="rejected")
    api_db.commit()

    for actor, stage in [(y, "transferee"), (m, "manager"), (x, "transferee")]:
        r = client.post(
            f"/task-transfers/{tr.id}/responses",
            json={"stage": stage, "approve": True},
            headers=_hdr(actor),
        )
        assert r.status_code == 403, r.text
        assert r.json()["kind"] == "invalid_state"


def test_manager_answer_before_recipient_is_403(client, api_db):
    x, y, m, a = _setup(api_db)
    tr = _request(client, a, x, y).json()

    r = client.post(
        f"/task-transfers/{tr['id']}/responses",
        json={"stage": "manager", "approve": True},
        headers=_hdr(m),
    )
    assert r.status_code == 403, r.text
    assert r.json()["kind"] == "invalid_state"

    r = client.get(f"/task-transfers/{tr['id']}", headers=_hdr(x))
    assert r.json()["status"] == "pending_transferee"
    assert r.json()["row_version"] == 1


def test_recipient_cannot_answer_twice(client, api_db):
    x, y, _, a = _setup(api_db)
    tr = _request(client, a, x, y).json()
    url = f"/task-transfers/{tr['id']}/responses"

    assert client.post(url, json={"stage": "transferee", "approve": True}, headers=_hdr(y)).status_code == 200

    r = client.post(url, json={"stage": "transferee", "approve": False}, headers=_hdr(y))
    assert r.status_code == 403, r.text
    assert r.json()["kind"] == "invalid_state"


def test_wrong_recipient_is_403(client, api_db):
    x, y, m, a = _setup(api_db)
    tr = _request(client, a, x, y).json()

    r = client.post(
        f"/task-transfers/{tr['id']}/responses",
        json={"stage": "transferee", "approve": True},
        headers=_hdr(m),
    )
    assert r.status_code == 403, r.text


def test_stale_row_version_is_409(client, api_db):
    x, y, _, a = _setup(api_db)
    tr = _request(client, a, x, y).json()

    r = client.post(
        f"/task-transfers/{tr['id']}/responses",
        json={"stage": "transferee", "approve": False, "expected_row_version": 5},
        headers=_hdr(y),
    )
    assert r.status_code == 409, r.text
    assert r.json()["kind"] == "version_conflict"


def test_unknown_stage_is_422(client, api_db):
    x, y, _, a = _setup(api_db)
    tr = _request(client, a, x, y).json()

    r = client.post(
        f"/task-transfers/{tr['id']}/responses",
        json={"stage": "owner", "approve": True},
        headers=_hdr(y),
    )
    assert r.status_code == 422, r.text
    assert r.json()["kind"] == "invalid_request"


def test_outsider_cannot_read_transfer(client, api_db):
    x, y, _, a = _setup(api_db)
    outsider = make_profile(api_db)
    api_db.commit()
    tr = _request(client, a, x, y).json()

    r = client.get(f"/task-transfers/{tr['id']}", headers=_hdr(outsider))
    assert r.status_code == 403, r.text

    r = client.get("/task-transfers", headers=_hdr(outsider))
    assert r.json() == []
