"""Listing workspaces and their projects."""

from __future__ import annotations

import json
import logging

from tfve.client import TerraformClient
from tfve.models import Project, Workspace

logger = logging.getLogger("tfve")


def discover_workspaces(client: TerraformClient) -> list[Workspace]:
    """Return every workspace of the organization joined with its parent project."""
    projects = {p.id: p for p in client.list_projects()}
    logger.info(f"{len(projects)} projects found.")

    workspaces = []
    for ws in client.list_workspaces():
        project_ref = ws.get("relationships", {}).get("project", {}).get("data") or {}
        project_id = project_ref.get("id")
        project = None
        if project_id:
            # Projects the token cannot read still show up by id
            project = projects.get(project_id, Project(id=project_id, name=""))
        workspaces.append(Workspace(id=ws["id"], name=ws["attributes"]["name"], project=project))

    logger.info(f"{len(workspaces)} workspaces found.")
    return workspaces


def format_workspaces(workspaces: list[Workspace]) -> str:
    return json.dumps([ws.to_dict() for ws in workspaces], indent=2)
