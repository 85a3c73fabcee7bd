"""
HTTP client for the daemon's JSON gateway.

This module provides a requests-based implementation of the Client
interface.
"""

from typing import Any, Optional

import requests

from opsh_lib.errors import ClientConnectionError, ClientError, DaemonValidationError

from . import Client


# Status codes the daemon uses to reject a request with a reason
VALIDATION_STATUS = (400, 409, 422)


class HttpClient(Client):
    """HTTP client for the daemon API."""

    def __init__(self, address: str, timeout: float = 30):
        self.address = address.rstrip("/")
        if not self.address.startswith("http"):
            self.address = f"http://{self.address}"
        self.timeout = timeout
        self.http = requests.Session()

    @classmethod
    def connect(cls, address: str, timeout: float = 30) -> "HttpClient":
        """Create a client and check that the daemon answers."""
        client = cls(address, timeout)
        try:
            client.get_capabilities()
        except ClientError as e:
            raise ClientConnectionError(str(e)) from e
        return client

    def _request(self, method: str, endpoint: str, **kwargs) -> Any:
        url = f"{self.address}{endpoint}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ClientError(f"request to {url} failed: {e}") from e

        if response.status_code in VALIDATION_STATUS:
            raise DaemonValidationError(self._error_detail(response))
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ClientError(f"{method} {endpoint}: {self._error_detail(response)}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ClientError(f"{method} {endpoint}: invalid JSON response") from e

    @staticmethod
    def _error_detail(response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return response.text.strip() or f"HTTP {response.status_code}"

    def get_capabilities(self) -> list[dict]:
        data = self._request("GET", "/capabilities")
        return data.get("modules", [])

    def get_schema(self, name: str, revision: Optional[str] = None) -> str:
        params = {"format": "yang"}
        if revision:
            params["revision"] = revision
        data = self._request("GET", f"/schema/{name}", params=params)
        return data.get("data", "")

    def get_running_config(self) -> dict:
        return self._request("GET", "/data", params={"type": "config"})

    def get_state(self, path: Optional[str] = None) -> dict:
        params = {"type": "state"}
        if path:
            params["path"] = path
        return self._request("GET", "/data", params=params)

    def commit(self, changes: list[dict], comment: Optional[str] = None) -> Optional[int]:
        payload = {"operation": "change", "changes": changes}
        if comment:
            payload["comment"] = comment
        data = self._request("POST", "/commit", json=payload)
        return data.get("transaction_id")

    def validate(self, config: dict) -> None:
        self._request("POST", "/validate", json={"config": config})

    def execute_rpc(self, path: str, rpc_input: dict) -> dict:
        data = self._request("POST", "/rpc", json={"path": path, "input": rpc_input})
        return data.get("output", {})
