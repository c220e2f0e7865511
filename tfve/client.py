"""Terraform API v2 client with pagination and client-side rate limiting."""

from __future__ import annotations

import logging
import time
import urllib.parse
from typing import Any

import requests

from tfve.models import (
    API_V2,
    DEFAULT_RATE_LIMIT,
    PAGE_SIZE,
    REQUEST_TIMEOUT,
    VARIABLE_CATEGORY,
    ConnectionSettings,
    Project,
    RemoteVariable,
    Workspace,
)


class TerraformClient:
    """Thin wrapper around the HCP Terraform / Terraform Enterprise REST API (JSON:API)."""

    def __init__(
        self,
        settings: ConnectionSettings,
        dry_run: bool = False,
        rate_limit: float = DEFAULT_RATE_LIMIT,
    ):
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.api_url = f"{self.base_url}{API_V2}"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {settings.token}",
                "Content-Type": "application/vnd.api+json",
            }
        )
        self.dry_run = dry_run
        self.min_interval = 1.0 / rate_limit if rate_limit > 0 else 0.0
        self._last_request: float | None = None
        self.logger = logging.getLogger("tfve")

    @property
    def organization(self) -> str:
        return self.settings.organization

    def _throttle(self) -> None:
        """Sleep so consecutive requests are at least min_interval apart."""
        now = time.monotonic()
        if self._last_request is not None and self.min_interval:
            wait_time = self.min_interval - (now - self._last_request)
            if wait_time > 0:
                time.sleep(wait_time)
                now = time.monotonic()
        self._last_request = now

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Make a single HTTP request. Failures are raised, never retried."""
        url = f"{self.api_url}{endpoint}"
        self._throttle()
        self.logger.debug(f"{method.upper()} {url} {kwargs.get('params', '')}")
        resp = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        if resp.status_code >= 400:
            self.logger.debug(f"API error {resp.status_code}: {resp.text[:500]}")
        resp.raise_for_status()
        return resp

    def get(self, endpoint: str, params: dict | None = None) -> Any:
        return self._request("GET", endpoint, params=params).json()

    def post(self, endpoint: str, data: dict | None = None) -> Any:
        return self._request("POST", endpoint, json=data).json()

    def patch(self, endpoint: str, data: dict | None = None) -> Any:
        return self._request("PATCH", endpoint, json=data).json()

    def paginate(self, endpoint: str, params: dict | None = None) -> list[dict]:
        """Fetch every page of a JSON:API collection and return the combined ``data``."""
        params = dict(params or {})
        params.setdefault("page[size]", PAGE_SIZE)
        page = 1
        results = []
        while True:
            params["page[number]"] = page
            body = self._request("GET", endpoint, params=params).json()
            data = body.get("data") or []
            results.extend(data)
            next_page = body.get("meta", {}).get("pagination", {}).get("next-page")
            if not data or not next_page:
                break
            page = int(next_page)
        return results

    # -- Workspaces and projects --

    def resolve_workspace(self, name: str) -> Workspace:
        """Resolve a workspace name within the organization to a Workspace."""
        org = urllib.parse.quote(self.organization, safe="")
        ws = self.get(f"/organizations/{org}/workspaces/{urllib.parse.quote(name, safe='')}")["data"]
        return Workspace(id=ws["id"], name=ws["attributes"]["name"])

    def list_projects(self) -> list[Project]:
        org = urllib.parse.quote(self.organization, safe="")
        return [Project(id=p["id"], name=p["attributes"]["name"]) for p in self.paginate(f"/organizations/{org}/projects")]

    def list_workspaces(self) -> list[dict]:
        """Raw workspace records of the organization."""
        org = urllib.parse.quote(self.organization, safe="")
        return self.paginate(f"/organizations/{org}/workspaces")

    # -- Variables --

    def list_variables(self, workspace_id: str) -> list[RemoteVariable]:
        data = self.get(f"/workspaces/{workspace_id}/vars").get("data", [])
        return [RemoteVariable.from_api(v) for v in data]

    def get_variable(self, workspace_id: str, name: str) -> RemoteVariable | None:
        """Find the terraform-category variable called ``name``, if any."""
        for var in self.list_variables(workspace_id):
            if var.name == name and var.category == VARIABLE_CATEGORY:
                return var
        return None

    def create_variable(
        self,
        workspace_id: str,
        name: str,
        value: str,
        hcl: bool,
        description: str | None = None,
    ) -> RemoteVariable:
        attributes = {
            "key": name,
            "value": value,
            "category": VARIABLE_CATEGORY,
            "hcl": hcl,
            "sensitive": False,
        }
        if description is not None:
            attributes["description"] = description
        body = self.post(f"/workspaces/{workspace_id}/vars", data={"data": {"type": "vars", "attributes": attributes}})
        return RemoteVariable.from_api(body["data"])

    def update_variable(
        self,
        workspace_id: str,
        variable_id: str,
        value: str,
        hcl: bool,
        description: str | None = None,
    ) -> RemoteVariable:
        """Replace value and hcl flag; the description is only sent when given."""
        attributes: dict[str, Any] = {"value": value, "hcl": hcl}
        if description is not None:
            attributes["description"] = description
        body = self.patch(
            f"/workspaces/{workspace_id}/vars/{variable_id}",
            data={"data": {"type": "vars", "id": variable_id, "attributes": attributes}},
        )
        return RemoteVariable.from_api(body["data"])
