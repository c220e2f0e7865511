"""Data models and constants for tfve."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://app.terraform.io"
API_V2 = "/api/v2"
PAGE_SIZE = 100
REQUEST_TIMEOUT = 30  # seconds

# The API allows 30 requests per second per user; stay well below it.
DEFAULT_RATE_LIMIT = 20  # requests per second

VARIABLE_CATEGORY = "terraform"

ENV_ORGANIZATION = "TFVE_ORGANIZATION_NAME"
ENV_TOKEN = "TFVE_TOKEN"
ENV_BASE_URL = "TFVE_BASE_URL"

FAILED_ACTIONS = ("missing_output", "conflict", "error")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ValueKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    STRUCTURED = "structured"

    @classmethod
    def from_type(cls, type_hint: Any) -> ValueKind | None:
        """Map a Terraform type annotation (``"string"``, ``["list", "string"]``...) to a kind."""
        if isinstance(type_hint, str):
            return {
                "string": cls.STRING,
                "number": cls.NUMBER,
                "bool": cls.BOOL,
            }.get(type_hint)
        if isinstance(type_hint, list):
            return cls.STRUCTURED
        return None

    @classmethod
    def from_value(cls, value: Any) -> ValueKind:
        # bool is a subclass of int, check it first
        if isinstance(value, bool):
            return cls.BOOL
        if isinstance(value, (int, float)):
            return cls.NUMBER
        if isinstance(value, str):
            return cls.STRING
        return cls.STRUCTURED


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------


@dataclass
class ConnectionSettings:
    """Everything needed to talk to the Terraform API."""

    base_url: str
    organization: str
    token: str = field(repr=False)

    @classmethod
    def from_env(cls, base_url: str | None = None) -> ConnectionSettings:
        """
        Build settings from the environment.

        Raises KeyError naming the first missing variable.
        """
        for name in (ENV_ORGANIZATION, ENV_TOKEN):
            if not os.environ.get(name):
                raise KeyError(name)
        return cls(
            base_url=base_url or os.environ.get(ENV_BASE_URL) or DEFAULT_BASE_URL,
            organization=os.environ[ENV_ORGANIZATION],
            token=os.environ[ENV_TOKEN],
        )


@dataclass
class OutputValue:
    """A non-sensitive Terraform output value."""

    name: str
    value: Any
    kind: ValueKind

    def to_variable_value(self) -> tuple[str, bool]:
        """Return the ``(value, hcl)`` pair to store on a workspace variable."""
        if self.kind is ValueKind.STRING:
            return str(self.value), False
        if self.kind is ValueKind.BOOL:
            return ("true" if self.value else "false"), False
        if self.kind is ValueKind.NUMBER:
            return json.dumps(self.value), False
        # JSON object/array/null syntax is also a valid HCL expression
        return json.dumps(self.value, separators=(",", ":"), ensure_ascii=False), True


@dataclass(frozen=True)
class ExportDirective:
    """One line of the export list."""

    source_output_name: str
    target_variable_name: str
    description: str | None = None
    line_number: int = 0


@dataclass
class RemoteVariable:
    """A variable as stored on a workspace."""

    id: str
    name: str
    value: str | None
    description: str | None = None
    is_hcl: bool = False
    sensitive: bool = False
    category: str = VARIABLE_CATEGORY

    @classmethod
    def from_api(cls, data: dict) -> RemoteVariable:
        attrs = data.get("attributes", {})
        return cls(
            id=data["id"],
            name=attrs["key"],
            value=attrs.get("value"),
            description=attrs.get("description"),
            is_hcl=bool(attrs.get("hcl", False)),
            sensitive=bool(attrs.get("sensitive", False)),
            category=attrs.get("category", VARIABLE_CATEGORY),
        )


@dataclass
class Project:
    id: str
    name: str


@dataclass
class Workspace:
    """Resolved workspace, optionally with its parent project."""

    id: str
    name: str
    project: Project | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.project is not None:
            d["project"] = {"id": self.project.id, "name": self.project.name}
        return d


@dataclass
class ActionResult:
    """Result of exporting one directive to one workspace."""

    workspace: str
    variable: str
    source: str
    # "created", "updated", "would_create", "would_update",
    # "missing_output", "conflict", "error"
    action: str
    detail: str = ""
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        return self.action in FAILED_ACTIONS

    def to_dict(self) -> dict:
        d = {
            "workspace": self.workspace,
            "variable": self.variable,
            "source": self.source,
            "action": self.action,
            "detail": self.detail,
        }
        if self.dry_run:
            d["dry_run"] = True
        return d
