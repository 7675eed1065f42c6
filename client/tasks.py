from __future__ import annotations

from typing import Any, Dict, Optional

from client.api import ApiClient


class TaskService:
    def __init__(self, client: ApiClient):
        self.client = client

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Returns {"data": [...], "meta": {page, limit, total, total_pages}}."""
        params: Dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        return self.client.get("/tasks", params=params)

    def create(self, title: str, description: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"title": title}
        if description is not None:
            payload["description"] = description
        return self.client.post("/tasks", json=payload)["data"]

    def get(self, task_id: int) -> Dict[str, Any]:
        return self.client.get(f"/tasks/{task_id}")["data"]

    def update(
        self,
        task_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Dict[str, Any]:
        fields = {"title": title, "description": description, "status": status}
        payload = {k: v for k, v in fields.items() if v is not None}
        return self.client.patch(f"/tasks/{task_id}", json=payload)["data"]

    def delete(self, task_id: int) -> None:
        self.client.delete(f"/tasks/{task_id}")

    def toggle(self, task_id: int) -> Dict[str, Any]:
        return self.client.post(f"/tasks/{task_id}/toggle")["data"]
