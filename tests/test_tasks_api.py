# tests/test_tasks_api.py

from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

API = "/api/v1"


def _create_user(client: TestClient, username: str = "u1") -> str:
    resp = client.post(f"{API}/users/", json={"username": username, "email": f"{username}@example.com"})
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def _create_task(client: TestClient, user_id: str, **body) -> dict:
    body.setdefault("title", "Write report")
    resp = client.post(f"{API}/tasks/user/{user_id}", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_search_scenario_by_status(client: TestClient) -> None:
    u1 = _create_user(client)
    task = _create_task(client, u1, title="Write report", status="TODO")
    assert task["version"] == 1
    assert task["priority"] == "MEDIUM"

    todo = client.post(f"{API}/tasks/search", json={"status": "TODO"})
    assert todo.status_code == 200
    assert [t["id"] for t in todo.json()] == [task["id"]]

    done = client.post(f"{API}/tasks/search", json={"status": "DONE"})
    assert done.status_code == 200
    assert done.json() == []


def test_empty_search_returns_everything(client: TestClient) -> None:
    u1 = _create_user(client)
    for title in ("a", "b", "c"):
        _create_task(client, u1, title=title)

    resp = client.post(f"{API}/tasks/search", json={})
    assert len(resp.json()) == 3


def test_paginated_search_supports_tag_filter(client: TestClient) -> None:
    u1 = _create_user(client)
    tag = client.post(f"{API}/tags/", json={"name": "work", "color": "#FF5733"}).json()
    ids = [_create_task(client, u1, title=f"Task {i}")["id"] for i in range(5)]
    for task_id in ids[:3]:
        assert client.post(f"{API}/tasks/{task_id}/tags/{tag['id']}").status_code == 200

    resp = client.post(
        f"{API}/tasks/search/paginated",
        params={"page": 0, "size": 2, "sort_by": "title", "direction": "ASC"},
        json={"tag_name": "work"},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert [t["title"] for t in body["items"]] == ["Task 0", "Task 1"]


def test_paginated_search_rejects_unknown_sort(client: TestClient) -> None:
    resp = client.post(f"{API}/tasks/search/paginated", params={"sort_by": "nope"}, json={})
    assert resp.status_code == 400


def test_create_task_for_missing_user_is_404(client: TestClient) -> None:
    resp = client.post(f"{API}/tasks/user/{uuid.uuid4()}", json={"title": "Orphan"})
    assert resp.status_code == 404
    assert "User not found" in resp.json()["detail"]


def test_title_length_is_validated(client: TestClient) -> None:
    u1 = _create_user(client)
    resp = client.post(f"{API}/tasks/user/{u1}", json={"title": "x" * 101})
    assert resp.status_code == 422


def test_update_bumps_version_and_rejects_stale_version(client: TestClient) -> None:
    u1 = _create_user(client)
    task = _create_task(client, u1)

    first = client.put(f"{API}/tasks/{task['id']}", json={"status": "IN_PROGRESS", "version": 1})
    assert first.status_code == 200
    assert first.json()["version"] == 2

    stale = client.put(f"{API}/tasks/{task['id']}", json={"status": "DONE", "version": 1})
    assert stale.status_code == 409

    current = client.get(f"{API}/tasks/{task['id']}").json()
    assert current["status"] == "IN_PROGRESS"
    assert current["version"] == 2


def test_retry_endpoint_updates(client: TestClient) -> None:
    u1 = _create_user(client)
    task = _create_task(client, u1)

    resp = client.put(f"{API}/tasks/{task['id']}/retry", params={"max_retries": 2}, json={"title": "Renamed"})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Renamed"
    assert resp.json()["version"] == 2

    missing = client.put(f"{API}/tasks/{uuid.uuid4()}/retry", json={"title": "x"})
    assert missing.status_code == 404

    invalid = client.put(f"{API}/tasks/{task['id']}/retry", params={"max_retries": 0}, json={"title": "x"})
    assert invalid.status_code == 422


def test_status_counts_and_distinct_statuses(client: TestClient) -> None:
    u1 = _create_user(client)
    _create_task(client, u1, title="a", status="TODO")
    _create_task(client, u1, title="b", status="TODO")
    _create_task(client, u1, title="c", status="DONE")

    counts = client.get(f"{API}/tasks/stats/status-counts").json()
    assert counts == {"TODO": 2, "DONE": 1}

    statuses = client.get(f"{API}/tasks/stats/statuses").json()
    assert statuses == ["DONE", "TODO"]

    assert client.get(f"{API}/tasks/stats/count", params={"status": "TODO"}).json() == 2


def test_bulk_status_update_and_delete_by_age(client: TestClient) -> None:
    u1 = _create_user(client)
    _create_task(client, u1, title="a", status="TODO")
    _create_task(client, u1, title="b", status="TODO")
    _create_task(client, u1, title="c", status="DONE")

    resp = client.patch(f"{API}/tasks/bulk/status", json={"old_status": "TODO", "new_status": "DONE"})
    assert resp.json() == {"affected": 2}

    # Nothing is older than ten days
    resp = client.delete(f"{API}/tasks/old", params={"days_old": 10})
    assert resp.json() == {"affected": 0}

    # Zero days means "created before now"
    resp = client.delete(f"{API}/tasks/old", params={"days_old": 0})
    assert resp.json() == {"affected": 3}
    assert client.get(f"{API}/tasks/").json() == []


def test_recent_by_status_defaults_to_five(client: TestClient) -> None:
    u1 = _create_user(client)
    titles = [f"t{i}" for i in range(7)]
    for title in titles:
        _create_task(client, u1, title=title)

    resp = client.get(f"{API}/tasks/recent", params={"status": "TODO"})
    assert resp.status_code == 200
    assert len(resp.json()) == 5


def test_keyword_listing(client: TestClient) -> None:
    u1 = _create_user(client)
    _create_task(client, u1, title="Write REPORT", description="x")
    _create_task(client, u1, title="Other", description="report draft", status="DONE")

    by_title = client.get(f"{API}/tasks/", params={"keyword": "report"}).json()
    assert [t["title"] for t in by_title] == ["Write REPORT"]

    by_both = client.get(f"{API}/tasks/", params={"keyword": "report", "status": "DONE"}).json()
    assert [t["title"] for t in by_both] == ["Other"]


def test_delete_task_removes_it_from_tags(client: TestClient) -> None:
    u1 = _create_user(client)
    tag = client.post(f"{API}/tags/", json={"name": "work"}).json()
    task = _create_task(client, u1)
    client.post(f"{API}/tasks/{task['id']}/tags/{tag['id']}")

    assert client.delete(f"{API}/tasks/{task['id']}").status_code == 204
    assert client.get(f"{API}/tasks/{task['id']}").status_code == 404
    assert client.get(f"{API}/tasks/by-tag/work").json() == []


def test_batch_delete(client: TestClient) -> None:
    u1 = _create_user(client)
    ids = [_create_task(client, u1, title=f"t{i}")["id"] for i in range(3)]

    resp = client.request("DELETE", f"{API}/tasks/batch", json=ids[:2])
    assert resp.json() == {"affected": 2}
    assert [t["id"] for t in client.get(f"{API}/tasks/").json()] == [ids[2]]


def test_add_and_remove_tag(client: TestClient) -> None:
    u1 = _create_user(client)
    tag = client.post(f"{API}/tags/", json={"name": "home"}).json()
    task = _create_task(client, u1)

    added = client.post(f"{API}/tasks/{task['id']}/tags/{tag['id']}").json()
    assert [t["name"] for t in added["tags"]] == ["home"]
    assert [t["name"] for t in client.get(f"{API}/tasks/{task['id']}/tags").json()] == ["home"]

    removed = client.delete(f"{API}/tasks/{task['id']}/tags/{tag['id']}").json()
    assert removed["tags"] == []

    missing = client.post(f"{API}/tasks/{task['id']}/tags/{uuid.uuid4()}")
    assert missing.status_code == 404


def test_created_filter_accepts_either_bound(client: TestClient) -> None:
    u1 = _create_user(client)
    task = _create_task(client, u1)
    past = "2000-01-01T00:00:00+00:00"
    future = "2100-01-01T00:00:00+00:00"

    assert [t["id"] for t in client.get(f"{API}/tasks/created", params={"before": future}).json()] == [task["id"]]
    assert client.get(f"{API}/tasks/created", params={"before": past}).json() == []
    assert [t["id"] for t in client.get(f"{API}/tasks/created", params={"after": past}).json()] == [task["id"]]
    assert len(client.get(f"{API}/tasks/created", params={"after": past, "before": future}).json()) == 1
    assert len(client.get(f"{API}/tasks/created", params={"days": 1}).json()) == 1
    assert client.get(f"{API}/tasks/created").status_code == 400
