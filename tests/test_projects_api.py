import logging

from sqlmodel import Session, select

from app.models import Project, Task
from app.services.projects import sweep_orphan_tasks
from tests.conftest import auth

API = "/api/v1"


def create_task(client, user, project_id, **fields):
    response = client.post(
        f"{API}/tasks",
        json={"project_id": project_id, "title": "Task", **fields},
        headers=auth(user),
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_owner_creates_project_without_members(client, owner):
    response = client.post(
        f"{API}/projects",
        json={"name": "Solo", "end_date": "2030-06-30"},
        headers=auth(owner),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["owner_id"] == owner.id
    assert body["members"] == []
    assert body["status"] == "Planning"
    assert body["tasks"] == []


def test_create_project_requires_end_date(client, owner):
    response = client.post(f"{API}/projects", json={"name": "Open ended"}, headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationFailed"
    assert response.json()["field"] == "end_date"


def test_create_project_requires_authentication(client):
    response = client.post(f"{API}/projects", json={"name": "Anon", "end_date": "2030-01-01"})
    assert response.status_code == 401


def test_initial_members_default_to_member_role(project, member, manager):
    roles = {m["user_id"]: m["role"] for m in project["members"]}
    assert roles == {manager.id: "Manager", member.id: "Member"}


def test_add_member_twice(client, owner, outsider, project):
    url = f"{API}/projects/{project['id']}/members"
    response = client.post(url, json={"user_id": outsider.id, "role": "Member"}, headers=auth(owner))
    assert response.status_code == 200
    assert outsider.id in [m["user_id"] for m in response.json()["members"]]

    response = client.post(url, json={"user_id": outsider.id}, headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["error"] == "AlreadyMember"


def test_add_member_unknown_user(client, owner, project):
    response = client.post(
        f"{API}/projects/{project['id']}/members", json={"user_id": "nobody"}, headers=auth(owner)
    )
    assert response.status_code == 404


def test_plain_member_cannot_add_members(client, member, outsider, project):
    response = client.post(
        f"{API}/projects/{project['id']}/members", json={"user_id": outsider.id}, headers=auth(member)
    )
    assert response.status_code == 403
    assert response.json()["reason"] == "not_manager"


def test_remove_member(client, manager, member, project):
    response = client.delete(f"{API}/projects/{project['id']}/members/{member.id}", headers=auth(manager))
    assert response.status_code == 200
    assert member.id not in [m["user_id"] for m in response.json()["members"]]


def test_owner_cannot_be_removed_even_by_owner(client, owner, member, project):
    for caller in (owner, member):
        response = client.delete(f"{API}/projects/{project['id']}/members/{owner.id}", headers=auth(caller))
        assert response.status_code == 400
        assert response.json()["error"] == "CannotRemoveOwner"


def test_update_project_by_manager(client, manager, project):
    response = client.patch(
        f"{API}/projects/{project['id']}",
        json={"status": "Active", "name": "Launch v2"},
        headers=auth(manager),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Active"
    assert response.json()["name"] == "Launch v2"


def test_update_project_rejects_fields_outside_allow_list(client, owner, project):
    response = client.patch(
        f"{API}/projects/{project['id']}",
        json={"name": "Renamed", "owner_id": "someone-else"},
        headers=auth(owner),
    )
    assert response.status_code == 400
    assert response.json()["fields"] == ["owner_id"]


def test_update_project_by_member_denied(client, member, project):
    response = client.patch(f"{API}/projects/{project['id']}", json={"name": "Mine"}, headers=auth(member))
    assert response.status_code == 403


def test_read_project_access(client, owner, member, outsider, project):
    assert client.get(f"{API}/projects/{project['id']}", headers=auth(member)).status_code == 200
    assert client.get(f"{API}/projects/{project['id']}", headers=auth(outsider)).status_code == 403

    # A task assigned to a user who later leaves the project still grants read access
    create_task(client, owner, project["id"], assignee_id=member.id)
    client.delete(f"{API}/projects/{project['id']}/members/{member.id}", headers=auth(owner))
    assert client.get(f"{API}/projects/{project['id']}", headers=auth(member)).status_code == 200


def test_read_missing_project(client, owner):
    response = client.get(f"{API}/projects/999", headers=auth(owner))
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


def test_list_projects_is_deduplicated(client, owner, member, outsider, project):
    other = client.post(
        f"{API}/projects", json={"name": "Other", "end_date": "2030-01-01"}, headers=auth(outsider)
    ).json()
    create_task(client, owner, project["id"], assignee_id=member.id)

    ids = [p["id"] for p in client.get(f"{API}/projects", headers=auth(owner)).json()]
    assert ids == [project["id"]]

    ids = [p["id"] for p in client.get(f"{API}/projects", headers=auth(member)).json()]
    assert ids == [project["id"]]

    ids = [p["id"] for p in client.get(f"{API}/projects", headers=auth(outsider)).json()]
    assert ids == [other["id"]]


def test_delete_project_cascades_to_tasks(client, engine, owner, member, project):
    first = create_task(client, owner, project["id"])
    second = create_task(client, member, project["id"], assignee_id=member.id)

    response = client.delete(f"{API}/projects/{project['id']}", headers=auth(owner))
    assert response.status_code == 200

    with Session(engine) as session:
        assert session.get(Project, project["id"]) is None
        assert session.exec(select(Task)).all() == []

    assert client.get(f"{API}/tasks/{first['id']}", headers=auth(owner)).status_code == 404
    assert client.get(f"{API}/tasks/{second['id']}", headers=auth(member)).status_code == 404


def test_only_owner_deletes_project(client, manager, project):
    response = client.delete(f"{API}/projects/{project['id']}", headers=auth(manager))
    assert response.status_code == 403
    assert response.json()["reason"] == "not_owner"


def test_project_stats(client, owner, member, outsider, project):
    create_task(client, owner, project["id"], priority="High")
    task = create_task(client, member, project["id"], assignee_id=member.id, due_date="2000-01-01")
    client.patch(f"{API}/tasks/{task['id']}", json={"status": "In Progress"}, headers=auth(member))

    stats = client.get(f"{API}/projects/{project['id']}/stats", headers=auth(member)).json()
    assert stats["total_tasks"] == 2
    assert stats["todo_tasks"] == 1
    assert stats["in_progress_tasks"] == 1
    assert stats["high_priority_tasks"] == 1
    assert stats["medium_priority_tasks"] == 1
    assert stats["overdue_tasks"] == 1

    response = client.get(f"{API}/projects/{project['id']}/stats", headers=auth(outsider))
    assert response.status_code == 403


def test_sweep_removes_tasks_left_without_project(client, engine, owner, member, project):
    orphan = create_task(client, owner, project["id"])
    other = client.post(
        f"{API}/projects", json={"name": "Other", "end_date": "2030-01-01"}, headers=auth(member)
    ).json()
    kept = create_task(client, member, other["id"])

    with Session(engine) as session:
        # Project row gone, its task still there: an interrupted cascade delete
        session.delete(session.get(Project, project["id"]))
        session.commit()

        assert sweep_orphan_tasks(session) == 1
        assert session.get(Task, orphan["id"]) is None
        assert session.get(Task, kept["id"]) is not None
        assert sweep_orphan_tasks(session) == 0


def test_rejected_action_is_logged(client, member, project, caplog):
    with caplog.at_level(logging.WARNING, logger="app.main"):
        response = client.delete(f"{API}/projects/{project['id']}", headers=auth(member))
    assert response.status_code == 403
    assert any("AccessDenied" in record.getMessage() for record in caplog.records)
