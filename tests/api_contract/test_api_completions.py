# tests/api_contract/test_api_completions.py
"""
Completion endpoints: status codes + error kinds on the wire.
"""

from __future__ import annotations

from uuid import uuid4

from tests.factories import (
    make_assignment,
    make_completion,
    make_profile,
    make_task,
    make_workflow,
)


def _hdr(actor) -> dict[str, str]:
    return {"X-Actor-User-Id": str(actor.id)}


def _setup(api_db):
    emp = make_profile(api_db)
    t1 = make_task(api_db, title="line photo", photo_required=True)
    t2 = make_task(api_db, title="till count", notes_required=True)
    wf = make_workflow(api_db, tasks=[(t1, True), (t2, True)])
    a = make_assignment(api_db, workflow=wf, assigned_to=emp)
    api_db.commit()
    return emp, t1, t2, a


def test_complete_tasks_until_workflow_done(client, api_db):
    emp, t1, t2, a = _setup(api_db)

    r = client.post(
        f"/workflow-assignments/{a.id}/completions",
        json={"task_id": str(t1.id), "photo_url": "https://storage.example.com/p/1.jpg"},
        headers=_hdr(emp),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["workflow_completed"] is False
    assert body["completion"]["task_id"] == str(t1.id)
    assert body["completion"]["completed_by"] == str(emp.id)

    r = client.get(f"/workflow-assignments/{a.id}", headers=_hdr(emp))
    assert r.status_code == 200, r.text
    detail = r.json()
    assert detail["status"] == "pending"
    assert detail["required_total"] == 2
    assert detail["required_completed"] == 1

    r = client.post(
        f"/workflow-assignments/{a.id}/completions",
        json={"task_id": str(t2.id), "notes": "float is 200"},
        headers=_hdr(emp),
    )
    assert r.status_code == 201, r.text
    assert r.json()["workflow_completed"] is True

    r = client.get(f"/workflow-assignments/{a.id}", headers=_hdr(emp))
    detail = r.json()
    assert detail["status"] == "completed"
    assert detail["completed_at"] is not None
    assert len(detail["completions"]) == 2


def test_missing_photo_is_400(client, api_db):
    emp, t1, _, a = _setup(api_db)

    r = client.post(
        f"/workflow-assignments/{a.id}/completions",
        json={"task_id": str(t1.id)},
        headers=_hdr(emp),
    )
    assert r.status_code == 400, r.text
    assert r.json()["kind"] == "missing_photo"


def test_missing_notes_is_400(client, api_db):
    emp, _, t2, a = _setup(api_db)

    r = client.post(
        f"/workflow-assignments/{a.id}/completions",
        json={"task_id": str(t2.id), "notes": ""},
        headers=_hdr(emp),
    )
    assert r.status_code == 400, r.text
    assert r.json()["kind"] == "missing_notes"


def test_duplicate_completion_is_409(client, api_db):
    emp, _, t2, a = _setup(api_db)
    url = f"/workflow-assignments/{a.id}/completions"

    r1 = client.post(url, json={"task_id": str(t2.id), "notes": "one"}, headers=_hdr(emp))
    assert r1.status_code == 201, r1.text

    r2 = client.post(url, json={"task_id": str(t2.id), "notes": "two"}, headers=_hdr(emp))
    assert r2.status_code == 409, r2.text
    assert r2.json()["kind"] == "already_completed"

    r = client.get(f"/workflow-assignments/{a.id}/completions", headers=_hdr(emp))
    assert [c["notes"] for c in r.json()] == ["one"]


def test_other_employee_is_403(client, api_db):
    _, _, t2, a = _setup(api_db)
    other = make_profile(api_db)
    api_db.commit()

    r = client.post(
        f"/workflow-assignments/{a.id}/completions",
        json={"task_id": str(t2.id), "notes": "x"},
        headers=_hdr(other),
    )
    assert r.status_code == 403, r.text
    assert r.json()["kind"] == "forbidden"

    # reading someone else's assignment is forbidden too
    r = client.get(f"/workflow-assignments/{a.id}", headers=_hdr(other))
    assert r.status_code == 403, r.text


def test_unknown_assignment_is_404(client, api_db):
    emp = make_profile(api_db)
    api_db.commit()

    r = client.post(
        f"/workflow-assignments/{uuid4()}/completions",
        json={"task_id": str(uuid4())},
        headers=_hdr(emp),
    )
    assert r.status_code == 404, r.text
    assert r.json()["kind"] == "not_found"


def test_extra_fields_rejected_422(client, api_db):
    emp, _, t2, a = _setup(api_db)

    r = client.post(
        f"/workflow-assignments/{a.id}/completions",
        json={"task_id": str(t2.id), "notes": "x", "completed_by": str(uuid4())},
        headers=_hdr(emp),
    )
    assert r.status_code == 422, r.text
    assert r.json()["kind"] == "invalid_request"


def test_manager_edits_completion_notes(client, api_db):
    emp = make_profile(api_db)
    mgr = make_profile(api_db, role="manager")
    t = make_task(api_db)
    wf = make_workflow(api_db, tasks=[(t, True)])
    a = make_assignment(api_db, workflow=wf, assigned_to=emp)
    c = make_completion(api_db, assignment=a, task=t, completed_by=emp, notes="typo")
    api_db.commit()

    r = client.put(f"/task-completions/{c.id}", json={"notes": "fixed"}, headers=_hdr(mgr))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["notes"] == "fixed"
    assert body["edited_by"] == str(mgr.id)
    assert body["edit_history"][0]["previous_notes"] == "typo"
    assert body["edit_history"][0]["new_notes"] == "fixed"

    r = client.put(f"/task-completions/{c.id}", json={"notes": "mine"}, headers=_hdr(emp))
    assert r.status_code == 403, r.text
