"""Task tests — CRUD, ordering, filters, assignee rule, isolation.

Learn: These tests verify the rules that only the task service can
enforce:
1. New tasks start TODO/MEDIUM and record their creator
2. Listing order: URGENT > HIGH > MEDIUM > LOW, newest first within a priority
3. An assignee must be a member of the project's organization
4. A task is only reachable through its own project and organization

Pattern: Build up test data using the API (user → org → project → tasks).
"""

import uuid

import pytest

TASK_NOT_FOUND = {"success": False, "error": "Task not found"}
BAD_ASSIGNEE = {"success": False, "error": "Assignee must be a member of the organization"}


# ═══════════════════════════════════════════════════════════
# Shared fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture
async def project(owner, org, create_project):
    return await create_project(owner, org["id"], name="Task Project")


@pytest.fixture
def tasks_url(org, project):
    return f"/api/organizations/{org['id']}/projects/{project['id']}/tasks"


@pytest.fixture
async def member(owner, org, register_user, add_member):
    account = await register_user(name="Mia Member")
    await add_member(owner, org["id"], account)
    return account


# ═══════════════════════════════════════════════════════════
# Task CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_defaults(client, owner, project, tasks_url):
    """POST should create a TODO/MEDIUM task with no assignee."""
    r = await client.post(tasks_url, json={"title": "Fix bug"}, headers=owner.headers)
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Task created successfully"
    task = body["data"]
    assert task["title"] == "Fix bug"
    assert task["status"] == "TODO"
    assert task["priority"] == "MEDIUM"
    assert task["projectId"] == project["id"]
    assert task["creatorId"] == owner.id
    assert task["creator"]["email"] == owner.email
    assert task["assigneeId"] is None
    assert task["assignee"] is None
    assert task["description"] is None
    assert task["dueDate"] is None


@pytest.mark.asyncio
async def test_create_task_ignores_status(client, owner, tasks_url):
    """New tasks always start in TODO."""
    r = await client.post(
        tasks_url, json={"title": "Already done?", "status": "DONE"}, headers=owner.headers
    )
    assert r.status_code == 201
    assert r.json()["data"]["status"] == "TODO"


@pytest.mark.asyncio
async def test_create_task_with_assignee(client, owner, member, tasks_url):
    r = await client.post(
        tasks_url,
        json={
            "title": "Write docs",
            "description": "API reference",
            "priority": "HIGH",
            "assigneeId": member.id,
            "dueDate": "2030-01-15T00:00:00Z",
        },
        headers=owner.headers,
    )
    assert r.status_code == 201
    task = r.json()["data"]
    assert task["priority"] == "HIGH"
    assert task["assigneeId"] == member.id
    assert task["assignee"] == {"id": member.id, "name": member.name, "email": member.email}
    assert task["dueDate"].startswith("2030-01-15")


@pytest.mark.asyncio
async def test_create_task_assignee_must_be_member(client, owner, tasks_url, register_user):
    outsider = await register_user()
    r = await client.post(
        tasks_url,
        json={"title": "Outsourced", "assigneeId": outsider.id},
        headers=owner.headers,
    )
    assert r.status_code == 400
    assert r.json() == BAD_ASSIGNEE


@pytest.mark.asyncio
async def test_create_task_validation(client, owner, tasks_url):
    r = await client.post(
        tasks_url, json={"title": "x", "priority": "CRITICAL"}, headers=owner.headers
    )
    assert r.status_code == 400
    assert {d["path"] for d in r.json()["details"]} == {"title", "priority"}


@pytest.mark.asyncio
async def test_create_task_in_missing_project(client, owner, org):
    r = await client.post(
        f"/api/organizations/{org['id']}/projects/{uuid.uuid4()}/tasks",
        json={"title": "Orphan"},
        headers=owner.headers,
    )
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Project not found"}


@pytest.mark.asyncio
async def test_create_task_empty_assignee_is_rejected(client, owner, tasks_url):
    r = await client.post(
        tasks_url, json={"title": "Fix bug", "assigneeId": ""}, headers=owner.headers
    )
    assert r.status_code == 400
    assert r.json() == BAD_ASSIGNEE


@pytest.mark.asyncio
@pytest.mark.parametrize("due_date", [12345, "2024-01-01", "tomorrow", True])
async def test_create_task_due_date_must_be_iso_datetime(
    client, owner, tasks_url, due_date
):
    r = await client.post(
        tasks_url, json={"title": "Deadline", "dueDate": due_date}, headers=owner.headers
    )
    assert r.status_code == 400
    assert [d["path"] for d in r.json()["details"]] == ["dueDate"]


@pytest.mark.asyncio
async def test_create_task_due_date_is_returned_in_utc(client, owner, tasks_url):
    r = await client.post(
        tasks_url,
        json={"title": "Deadline", "dueDate": "2030-01-15T10:00:00+02:00"},
        headers=owner.headers,
    )
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["dueDate"] == "2030-01-15T08:00:00Z"
    assert data["createdAt"].endswith("Z")


@pytest.mark.asyncio
async def test_get_task_detail(client, owner, org, project, tasks_url, create_task):
    task = await create_task(owner, org["id"], project["id"], title="Inspect me")
    r = await client.get(f"{tasks_url}/{task['id']}", headers=owner.headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["id"] == task["id"]
    assert data["project"] == {"id": project["id"], "name": "Task Project"}


@pytest.mark.asyncio
async def test_get_missing_task(client, owner, tasks_url):
    r = await client.get(f"{tasks_url}/{uuid.uuid4()}", headers=owner.headers)
    assert r.status_code == 404
    assert r.json() == TASK_NOT_FOUND


@pytest.mark.asyncio
async def test_member_can_manage_tasks(client, member, org, project, tasks_url, create_task):
    """Task mutations are open to every member, not just OWNER/ADMIN."""
    task = await create_task(member, org["id"], project["id"])
    r = await client.patch(
        f"{tasks_url}/{task['id']}", json={"status": "IN_PROGRESS"}, headers=member.headers
    )
    assert r.status_code == 200
    r = await client.delete(f"{tasks_url}/{task['id']}", headers=member.headers)
    assert r.status_code == 200


# ═══════════════════════════════════════════════════════════
# Listing
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_orders_by_priority_then_newest(
    client, owner, org, project, tasks_url, create_task
):
    pid = project["id"]
    low = await create_task(owner, org["id"], pid, title="Low", priority="LOW")
    urgent = await create_task(owner, org["id"], pid, title="Urgent", priority="URGENT")
    high_old = await create_task(owner, org["id"], pid, title="High old", priority="HIGH")
    medium = await create_task(owner, org["id"], pid, title="Medium")
    high_new = await create_task(owner, org["id"], pid, title="High new", priority="HIGH")

    r = await client.get(tasks_url, headers=owner.headers)
    assert r.status_code == 200
    assert [t["id"] for t in r.json()["data"]] == [
        urgent["id"],
        high_new["id"],
        high_old["id"],
        medium["id"],
        low["id"],
    ]


@pytest.mark.asyncio
async def test_list_filters(client, owner, member, org, project, tasks_url, create_task):
    pid = project["id"]
    mine = await create_task(owner, org["id"], pid, title="Assigned", assigneeId=member.id)
    urgent = await create_task(owner, org["id"], pid, title="Urgent", priority="URGENT")
    started = await create_task(owner, org["id"], pid, title="Started")
    await client.patch(
        f"{tasks_url}/{started['id']}", json={"status": "IN_PROGRESS"}, headers=owner.headers
    )

    r = await client.get(tasks_url, params={"status": "IN_PROGRESS"}, headers=owner.headers)
    assert [t["id"] for t in r.json()["data"]] == [started["id"]]

    r = await client.get(tasks_url, params={"priority": "URGENT"}, headers=owner.headers)
    assert [t["id"] for t in r.json()["data"]] == [urgent["id"]]

    r = await client.get(tasks_url, params={"assigneeId": member.id}, headers=owner.headers)
    assert [t["id"] for t in r.json()["data"]] == [mine["id"]]

    r = await client.get(
        tasks_url, params={"status": "TODO", "priority": "MEDIUM"}, headers=owner.headers
    )
    assert {t["id"] for t in r.json()["data"]} == {mine["id"]}


@pytest.mark.asyncio
async def test_list_invalid_filter(client, owner, tasks_url):
    r = await client.get(tasks_url, params={"priority": "SOMEDAY"}, headers=owner.headers)
    assert r.status_code == 400
    assert [d["path"] for d in r.json()["details"]] == ["priority"]


@pytest.mark.asyncio
async def test_list_only_this_project(client, owner, org, project, tasks_url, create_project, create_task):
    other = await create_project(owner, org["id"], name="Other Project")
    await create_task(owner, org["id"], other["id"], title="Elsewhere")
    here = await create_task(owner, org["id"], project["id"], title="Here")

    r = await client.get(tasks_url, headers=owner.headers)
    assert [t["id"] for t in r.json()["data"]] == [here["id"]]


# ═══════════════════════════════════════════════════════════
# Update / delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_task(client, owner, member, org, project, tasks_url, create_task):
    task = await create_task(owner, org["id"], project["id"], description="Keep me")
    r = await client.patch(
        f"{tasks_url}/{task['id']}",
        json={"status": "DONE", "priority": "LOW", "assigneeId": member.id},
        headers=owner.headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Task updated successfully"
    data = body["data"]
    assert data["status"] == "DONE"
    assert data["priority"] == "LOW"
    assert data["assignee"]["id"] == member.id
    assert data["title"] == task["title"]
    assert data["description"] == "Keep me"


@pytest.mark.asyncio
async def test_update_task_clears_nullable_fields(
    client, owner, member, org, project, tasks_url, create_task
):
    task = await create_task(
        owner,
        org["id"],
        project["id"],
        description="Temporary",
        assigneeId=member.id,
        dueDate="2030-06-01T12:00:00Z",
    )
    r = await client.patch(
        f"{tasks_url}/{task['id']}",
        json={"assigneeId": None, "description": None, "dueDate": None},
        headers=owner.headers,
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["assigneeId"] is None
    assert data["assignee"] is None
    assert data["description"] is None
    assert data["dueDate"] is None


@pytest.mark.asyncio
async def test_update_task_rejects_null_required_fields(
    client, owner, org, project, tasks_url, create_task
):
    task = await create_task(owner, org["id"], project["id"])
    r = await client.patch(
        f"{tasks_url}/{task['id']}",
        json={"title": None, "status": None},
        headers=owner.headers,
    )
    assert r.status_code == 400
    assert {d["path"] for d in r.json()["details"]} == {"title", "status"}


@pytest.mark.asyncio
async def test_update_task_assignee_must_be_member(
    client, owner, org, project, tasks_url, create_task, register_user
):
    task = await create_task(owner, org["id"], project["id"])
    outsider = await register_user()
    r = await client.patch(
        f"{tasks_url}/{task['id']}", json={"assigneeId": outsider.id}, headers=owner.headers
    )
    assert r.status_code == 400
    assert r.json() == BAD_ASSIGNEE

    r = await client.get(f"{tasks_url}/{task['id']}", headers=owner.headers)
    assert r.json()["data"]["assigneeId"] is None


@pytest.mark.asyncio
async def test_update_task_empty_assignee_is_rejected(
    client, owner, org, project, tasks_url, create_task
):
    task = await create_task(owner, org["id"], project["id"])
    r = await client.patch(
        f"{tasks_url}/{task['id']}", json={"assigneeId": ""}, headers=owner.headers
    )
    assert r.status_code == 400
    assert r.json() == BAD_ASSIGNEE


@pytest.mark.asyncio
async def test_update_task_due_date_must_be_iso_datetime(
    client, owner, org, project, tasks_url, create_task
):
    task = await create_task(owner, org["id"], project["id"])
    r = await client.patch(
        f"{tasks_url}/{task['id']}", json={"dueDate": 1700000000}, headers=owner.headers
    )
    assert r.status_code == 400
    assert [d["path"] for d in r.json()["details"]] == ["dueDate"]


@pytest.mark.asyncio
async def test_delete_task(client, owner, org, project, tasks_url, create_task):
    task = await create_task(owner, org["id"], project["id"])
    r = await client.delete(f"{tasks_url}/{task['id']}", headers=owner.headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Task deleted successfully"}

    r = await client.get(f"{tasks_url}/{task['id']}", headers=owner.headers)
    assert r.status_code == 404

    r = await client.get(tasks_url, headers=owner.headers)
    assert r.json()["data"] == []


# ═══════════════════════════════════════════════════════════
# Isolation
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_task_not_reachable_through_other_project(
    client, owner, org, project, create_project, create_task
):
    task = await create_task(owner, org["id"], project["id"])
    other = await create_project(owner, org["id"], name="Other Project")
    wrong = f"/api/organizations/{org['id']}/projects/{other['id']}/tasks/{task['id']}"

    r = await client.get(wrong, headers=owner.headers)
    assert r.status_code == 404
    assert r.json() == TASK_NOT_FOUND

    r = await client.patch(wrong, json={"title": "Moved?"}, headers=owner.headers)
    assert r.status_code == 404

    r = await client.delete(wrong, headers=owner.headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_task_not_reachable_through_other_organization(
    client, owner, org, project, create_org, create_task
):
    """Even with the right project id, another org's URL sees nothing."""
    task = await create_task(owner, org["id"], project["id"])
    other_org = await create_org(owner, name="Other Org")
    base = f"/api/organizations/{other_org['id']}/projects/{project['id']}/tasks"

    r = await client.get(base, headers=owner.headers)
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Project not found"}

    r = await client.get(f"{base}/{task['id']}", headers=owner.headers)
    assert r.status_code == 404

    r = await client.patch(f"{base}/{task['id']}", json={"title": "Nope"}, headers=owner.headers)
    assert r.status_code == 404

    r = await client.delete(f"{base}/{task['id']}", headers=owner.headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_non_member_cannot_touch_tasks(client, tasks_url, register_user):
    outsider = await register_user()
    r = await client.get(tasks_url, headers=outsider.headers)
    assert r.status_code == 403
    r = await client.post(tasks_url, json={"title": "Sneaky"}, headers=outsider.headers)
    assert r.status_code == 403
