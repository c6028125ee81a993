# tests/api_contract/test_api_workflows.py
"""
Manager-authored setup over HTTP: tasks -> workflow -> assignment.
"""

from __future__ import annotations

from tests.factories import make_assignment, make_profile, make_task, make_workflow


def _hdr(actor) -> dict[str, str]:
    return {"X-Actor-User-Id": str(actor.id)}


def test_manager_builds_and_assigns_workflow(client, api_db):
    mgr = make_profile(api_db, role="kitchen_manager")
    emp = make_profile(api_db)
    api_db.commit()

    r = client.post("/tasks", json={"title": "Photo of walk-in", "photo_required": True}, headers=_hdr(mgr))
    assert r.status_code == 201, r.text
    photo_task = r.json()

    r = client.post("/tasks", json={"title": "Sweep"}, headers=_hdr(mgr))
    sweep = r.json()

    r = client.post(
        "/workflows",
        json={
            "name": "Close",
            "is_repeatable": True,
            "recurrence_type": "daily",
            "tasks": [
                {"task_id": photo_task["id"]},
                {"task_id": sweep["id"], "is_required": False},
            ],
        },
        headers=_hdr(mgr),
    )
    assert r.status_code == 201, r.text
    wf = r.json()
    assert [wt["task"]["title"] for wt in wf["workflow_tasks"]] == ["Photo of walk-in", "Sweep"]
    assert [wt["is_required"] for wt in wf["workflow_tasks"]] == [True, False]

    r = client.post(
        "/workflow-assignments",
        json={"workflow_id": wf["id"], "assigned_to": str(emp.id), "due_date": "2030-01-01"},
        headers=_hdr(mgr),
    )
    assert r.status_code == 201, r.text
    assignment = r.json()
    assert assignment["status"] == "pending"
    assert assignment["due_date"] == "2030-01-01"

    r = client.post(
        "/workflow-assignments",
        json={"workflow_id": wf["id"], "assigned_to": str(emp.id), "due_date": "2030-01-01"},
        headers=_hdr(mgr),
    )
    assert r.status_code == 409, r.text
    assert r.json()["kind"] == "conflict"


def test_employee_cannot_author(client, api_db):
    emp = make_profile(api_db)
    t = make_task(api_db)
    api_db.commit()

    r = client.post("/tasks", json={"title": "x"}, headers=_hdr(emp))
    assert r.status_code == 403, r.text

    r = client.post("/workflows", json={"name": "x", "tasks": [{"task_id": str(t.id)}]}, headers=_hdr(emp))
    assert r.status_code == 403, r.text


def test_inconsistent_recurrence_is_422(client, api_db):
    mgr = make_profile(api_db, role="manager")
    t = make_task(api_db)
    api_db.commit()

    r = client.post(
        "/workflows",
        json={"name": "x", "is_repeatable": True, "recurrence_type": "once", "tasks": [{"task_id": str(t.id)}]},
        headers=_hdr(mgr),
    )
    assert r.status_code == 422, r.text


def test_all_optional_tasks_is_400(client, api_db):
    mgr = make_profile(api_db, role="manager")
    t = make_task(api_db)
    api_db.commit()

    r = client.post(
        "/workflows",
        json={"name": "x", "tasks": [{"task_id": str(t.id), "is_required": False}]},
        headers=_hdr(mgr),
    )
    assert r.status_code == 400, r.text
    assert r.json()["kind"] == "invalid_request"


def test_employees_only_list_their_own_assignments(client, api_db):
    mgr = make_profile(api_db, role="manager")
    e1 = make_profile(api_db)
    e2 = make_profile(api_db)
    t = make_task(api_db)
    wf = make_workflow(api_db, tasks=[(t, True)])
    a1 = make_assignment(api_db, workflow=wf, assigned_to=e1)
    a2 = make_assignment(api_db, workflow=wf, assigned_to=e2)
    api_db.commit()

    r = client.get("/workflow-assignments", headers=_hdr(e1))
    assert [x["id"] for x in r.json()] == [str(a1.id)]

    # assigned_to filter is ignored for non-managers
    r = client.get(f"/workflow-assignments?assigned_to={e2.id}", headers=_hdr(e1))
    assert [x["id"] for x in r.json()] == [str(a1.id)]

    r = client.get("/workflow-assignments", headers=_hdr(mgr))
    assert {x["id"] for x in r.json()} == {str(a1.id), str(a2.id)}

    r = client.get(f"/workflow-assignments?assigned_to={e2.id}", headers=_hdr(mgr))
    assert [x["id"] for x in r.json()] == [str(a2.id)]


def test_admin_creates_manager_profile_but_manager_cannot(client, api_db):
    admin = make_profile(api_db, role="admin")
    mgr = make_profile(api_db, role="manager")
    api_db.commit()

    body = {"name": "New Lead", "email": "New.Lead@Example.com", "role": "kitchen_manager"}

    r = client.post("/profiles", json=body, headers=_hdr(mgr))
    assert r.status_code == 403, r.text

    r = client.post("/profiles", json=body, headers=_hdr(admin))
    assert r.status_code == 201, r.text
    assert r.json()["email"] == "new.lead@example.com"

    r = client.post("/profiles", json=body, headers=_hdr(admin))
    assert r.status_code == 409, r.text
