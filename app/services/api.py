# app/services/api.py

import requests

# Base URL of the Tasks API server
FASTAPI_URL = "http://localhost:3000"


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class TasksApiClient:
    """
    Thin client over the Tasks API.

    ``http`` is anything with a requests-style ``request`` method; a
    ``requests.Session`` is created when none is given.
    """

    def __init__(self, base_url: str = FASTAPI_URL, http=None, token: str | None = None):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.token = token

    def _request(self, method, path, json=None):
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = self.http.request(method, f"{self.base_url}{path}", json=json, headers=headers)

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(response.status_code, message or response.text)
        return data

    # -------------------------------
    # Authentication
    # -------------------------------

    def register(self, username, password, role=None):
        payload = {"username": username, "password": password}
        if role is not None:
            payload["role"] = role
        return self._request("POST", "/api/register", json=payload)["user"]

    def login(self, username, password):
        """
        Logs in and keeps the token for the following calls.
        """
        data = self._request("POST", "/api/login", json={"username": username, "password": password})
        self.token = data["token"]
        return self.token

    def logout(self):
        self.token = None

    # -------------------------------
    # Tasks
    # -------------------------------

    def list_tasks(self):
        return self._request("GET", "/api/tasks")

    def get_task(self, task_id):
        return self._request("GET", f"/api/tasks/{task_id}")

    def create_task(self, title, description, assigned_to, status=None):
        payload = {"title": title, "description": description, "assignedTo": assigned_to}
        if status is not None:
            payload["status"] = status
        return self._request("POST", "/api/tasks", json=payload)

    def update_task(self, task_id, title=None, description=None, status=None, assigned_to=None):
        fields = {
            "title": title,
            "description": description,
            "status": status,
            "assignedTo": assigned_to,
        }
        payload = {k: v for k, v in fields.items() if v is not None}
        return self._request("PUT", f"/api/tasks/{task_id}", json=payload)

    def delete_task(self, task_id):
        return self._request("DELETE", f"/api/tasks/{task_id}")

    # -------------------------------
    # Users
    # -------------------------------

    def list_users(self):
        return self._request("GET", "/api/users")
