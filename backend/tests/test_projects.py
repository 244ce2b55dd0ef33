from fastapi.testclient import TestClient

from app.services.invite import INVITE_ALPHABET, INVITE_CODE_LENGTH

from .utils import auth, create_project, create_task, get_board, join_project


def test_create_project_returns_owner_identity(client: TestClient):
    resp = client.post("/api/projects", json={"projectName": "  Sprint  ", "displayName": "Ana"})
    assert resp.status_code == 201
    body = resp.json()

    assert body["project"]["name"] == "Sprint"
    code = body["project"]["inviteCode"]
    assert len(code) == INVITE_CODE_LENGTH
    assert set(code) <= set(INVITE_ALPHABET)
    assert body["member"]["displayName"] == "Ana"

    board = get_board(client, body["project"]["id"], body["member"]["id"])
    assert board["me"] == {"memberId": body["member"]["id"]}
    assert board["members"] == [{"id": body["member"]["id"], "displayName": "Ana", "role": "OWNER"}]


def test_create_project_validates_body(client: TestClient):
    resp = client.post("/api/projects", json={"projectName": "", "displayName": "Ana"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_BODY"

    resp = client.post("/api/projects", json={"projectName": "x" * 81, "displayName": "Ana"})
    assert resp.status_code == 400

    resp = client.post("/api/projects", json={"projectName": "Board"})
    assert resp.status_code == 400


def test_join_by_invite_code_is_case_insensitive(client: TestClient):
    project, owner_id = create_project(client)
    member_id = join_project(client, project["inviteCode"].lower(), "Bo")
    assert member_id != owner_id

    board = get_board(client, project["id"], member_id)
    roles = {m["displayName"]: m["role"] for m in board["members"]}
    assert roles == {"Owner": "OWNER", "Bo": "MEMBER"}
    assert [m["displayName"] for m in board["members"]] == ["Owner", "Bo"]


def test_join_with_unknown_code_is_404(client: TestClient):
    resp = client.post("/api/projects/join", json={"inviteCode": "ZZZZZZZZ", "displayName": "Bo"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "PROJECT_NOT_FOUND"


def test_board_requires_member_id(client: TestClient):
    project, _ = create_project(client)
    resp = client.get(f"/api/projects/{project['id']}/board")
    assert resp.status_code == 401
    body = resp.json()
    assert body["error"] == "MISSING_MEMBER_ID"
    assert "detail" in body

    resp = client.get(f"/api/projects/{project['id']}/board", headers={"Authorization": "Bearer   "})
    assert resp.status_code == 401


def test_board_accepts_x_member_id_header(client: TestClient):
    project, owner_id = create_project(client)
    resp = client.get(f"/api/projects/{project['id']}/board", headers={"X-Member-Id": owner_id})
    assert resp.status_code == 200
    assert resp.json()["me"]["memberId"] == owner_id


def test_board_of_other_project_is_forbidden(client: TestClient):
    project, _ = create_project(client, "Mine")
    _, stranger_id = create_project(client, "Theirs")

    resp = client.get(f"/api/projects/{project['id']}/board", headers=auth(stranger_id))
    assert resp.status_code == 403
    assert resp.json()["error"] == "FORBIDDEN"

    # unknown project id looks the same as a foreign one
    resp = client.get("/api/projects/unknown/board", headers=auth(stranger_id))
    assert resp.status_code == 403


def test_board_columns_are_renumbered(client: TestClient):
    project, owner_id = create_project(client)
    a = create_task(client, project["id"], owner_id, "A")
    create_task(client, project["id"], owner_id, "B")
    create_task(client, project["id"], owner_id, "Shipped", status="DONE")

    resp = client.delete(f"/api/tasks/{a['id']}", headers=auth(owner_id))
    assert resp.status_code == 200

    board = get_board(client, project["id"], owner_id)
    assert [(t["title"], t["order"]) for t in board["columns"]["TODO"]] == [("B", 0)]
    assert [(t["title"], t["order"]) for t in board["columns"]["DONE"]] == [("Shipped", 0)]
    assert board["columns"]["DOING"] == []
    # the flat list keeps stored orders
    assert {t["title"]: t["order"] for t in board["tasks"]}["B"] == 1


def test_list_members(client: TestClient):
    project, owner_id = create_project(client)
    join_project(client, project["inviteCode"], "Bo")

    resp = client.get(f"/api/projects/{project['id']}/members", headers=auth(owner_id))
    assert resp.status_code == 200
    assert [m["displayName"] for m in resp.json()["members"]] == ["Owner", "Bo"]

    _, stranger_id = create_project(client, "Theirs")
    resp = client.get(f"/api/projects/{project['id']}/members", headers=auth(stranger_id))
    assert resp.status_code == 403


def test_health_endpoints(client: TestClient):
    assert client.get("/health").json()["status"] == "ok"
    ready = client.get("/health/ready").json()
    assert ready == {"status": "ready", "database": "connected"}


def test_project_creation_is_rate_limited(client: TestClient):
    body = {"projectName": "Spam", "displayName": "Bot"}
    statuses = [client.post("/api/projects", json=body).status_code for _ in range(31)]
    assert statuses[:30] == [201] * 30
    assert statuses[30] == 429

    resp = client.post("/api/projects", json=body)
    assert resp.json()["error"] == "RATE_LIMITED"


def test_request_id_is_echoed(client: TestClient):
    resp = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
