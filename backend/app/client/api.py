"""
HTTP client for the board API.

Wraps an ``httpx.Client`` (FastAPI's ``TestClient`` is one too), sends the
stored member id on every call and turns ``{"error": CODE}`` responses into
``ApiError``.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from app.core.identity import member_headers

DEFAULT_BASE_URL = "http://127.0.0.1:8000"


class ApiError(Exception):
    def __init__(self, code: str, status_code: int, payload: Any = None):
        self.code = code
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"{code} (HTTP {status_code})")


class BoardApi:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        client: Optional[httpx.Client] = None,
        member_id: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self.member_id = member_id

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, json: Any = None) -> Any:
        headers = {"Accept": "application/json"}
        if self.member_id:
            headers.update(member_headers(self.member_id))

        try:
            response = self._client.request(method, path, json=json, headers=headers)
        except httpx.TransportError as exc:
            # timeouts and dropped connections: the write may or may not have landed
            raise ApiError("NETWORK_ERROR", 0, str(exc)) from exc
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            code = f"HTTP_{response.status_code}"
            if isinstance(payload, dict) and payload.get("error") is not None:
                code = str(payload["error"])
            raise ApiError(code, response.status_code, payload)
        return response.json()

    # Identity comes back from create/join and is remembered for later calls

    def create_project(self, project_name: str, display_name: str) -> dict:
        body = self._request(
            "POST", "/api/projects", {"projectName": project_name, "displayName": display_name}
        )
        self.member_id = body["member"]["id"]
        return body

    def join_project(self, invite_code: str, display_name: str) -> dict:
        body = self._request(
            "POST", "/api/projects/join", {"inviteCode": invite_code, "displayName": display_name}
        )
        self.member_id = body["member"]["id"]
        return body

    def get_board(self, project_id: str) -> dict:
        return self._request("GET", f"/api/projects/{project_id}/board")

    def put_layout(self, project_id: str, tasks: list[dict]) -> dict:
        return self._request("PUT", f"/api/projects/{project_id}/board", {"tasks": tasks})

    def create_task(self, project_id: str, title: str, **fields: Any) -> dict:
        return self._request("POST", f"/api/projects/{project_id}/tasks", {"title": title, **fields})["task"]

    def patch_task(self, task_id: str, **fields: Any) -> dict:
        return self._request("PATCH", f"/api/tasks/{task_id}", fields)["task"]

    def delete_task(self, task_id: str) -> dict:
        return self._request("DELETE", f"/api/tasks/{task_id}")
