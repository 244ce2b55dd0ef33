from fastapi.testclient import TestClient


def auth(member_id: str) -> dict:
    return {"Authorization": f"Bearer {member_id}"}


def create_project(client: TestClient, name: str = "Test Board", owner: str = "Owner") -> tuple[dict, str]:
    resp = client.post("/api/projects", json={"projectName": name, "displayName": owner})
    assert resp.status_code == 201
    body = resp.json()
    return body["project"], body["member"]["id"]


def join_project(client: TestClient, invite_code: str, display_name: str = "Teammate") -> str:
    resp = client.post("/api/projects/join", json={"inviteCode": invite_code, "displayName": display_name})
    assert resp.status_code == 200
    return resp.json()["member"]["id"]


def create_task(client: TestClient, project_id: str, member_id: str, title: str, **fields) -> dict:
    resp = client.post(
        f"/api/projects/{project_id}/tasks",
        json={"title": title, **fields},
        headers=auth(member_id),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["task"]


def get_board(client: TestClient, project_id: str, member_id: str) -> dict:
    resp = client.get(f"/api/projects/{project_id}/board", headers=auth(member_id))
    assert resp.status_code == 200, resp.text
    return resp.json()


def column_titles(board: dict, status: str) -> list[str]:
    return [task["title"] for task in board["columns"][status]]
