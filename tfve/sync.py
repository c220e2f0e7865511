"""Exporting output values to workspace variables."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

import requests

from tfve.models import ActionResult, ExportDirective, OutputValue, Workspace

if TYPE_CHECKING:
    from tfve.client import TerraformClient

ALL_WORKSPACES = "*"

ICONS = {
    "created": "✓",
    "updated": "✓",
    "would_create": "○",
    "would_update": "○",
    "missing_output": "?",
    "conflict": "·",
    "error": "✗",
}


class Synchronizer:
    """Create or update workspace variables from output values.

    Outcomes are collected in ``results``. Failures are recorded there and
    never stop the run.
    """

    def __init__(
        self,
        client: TerraformClient,
        outputs: dict[str, OutputValue],
        allow_update: bool = False,
    ):
        self.client = client
        self.outputs = outputs
        self.allow_update = allow_update
        self.logger = logging.getLogger("tfve")
        self.results: list[ActionResult] = []

    @property
    def dry_run(self) -> bool:
        return self.client.dry_run

    @property
    def failed(self) -> bool:
        return any(r.failed for r in self.results)

    def run(self, directives: list[ExportDirective], workspace_names: Iterable[str]) -> list[ActionResult]:
        """
        Export all directives to every named workspace.

        Directives whose output is missing are reported once, against all
        workspaces, and never reach the API.
        """
        exportable = []
        for directive in directives:
            if directive.source_output_name in self.outputs:
                exportable.append(directive)
            else:
                self._record_missing(ALL_WORKSPACES, directive)

        for name in workspace_names:
            if not exportable:
                break
            try:
                workspace = self.client.resolve_workspace(name)
            except requests.RequestException as e:
                for directive in exportable:
                    self._record(
                        self._result(name, directive, "error", f"Failed to resolve workspace: {_describe(e)}")
                    )
                continue
            self.logger.debug(f"Resolved workspace '{workspace.name}' (id={workspace.id})")
            self.sync_workspace(workspace, exportable)
        return self.results

    def sync_workspace(self, workspace: Workspace, directives: list[ExportDirective]) -> None:
        for directive in directives:
            self.apply(workspace, directive)

    def apply(self, workspace: Workspace, directive: ExportDirective) -> ActionResult:
        """Export a single directive to a single workspace."""
        output = self.outputs.get(directive.source_output_name)
        if output is None:
            return self._record_missing(workspace.name, directive)

        value, hcl = output.to_variable_value()

        try:
            existing = self.client.get_variable(workspace.id, directive.target_variable_name)
        except requests.RequestException as e:
            return self._record(
                self._result(workspace.name, directive, "error", f"Failed to get variables: {_describe(e)}")
            )

        if existing is None:
            action = "would_create" if self.dry_run else "created"
            if not self.dry_run:
                try:
                    self.client.create_variable(
                        workspace.id,
                        directive.target_variable_name,
                        value,
                        hcl,
                        description=directive.description,
                    )
                except requests.RequestException as e:
                    return self._record(
                        self._result(workspace.name, directive, "error", f"Failed to create: {_describe(e)}")
                    )
            return self._record(self._result(workspace.name, directive, action, f"hcl={str(hcl).lower()}"))

        if not self.allow_update:
            return self._record(
                self._result(
                    workspace.name,
                    directive,
                    "conflict",
                    f"variable exists (id={existing.id}), use --allow-update to overwrite",
                )
            )

        action = "would_update" if self.dry_run else "updated"
        if not self.dry_run:
            try:
                self.client.update_variable(
                    workspace.id,
                    existing.id,
                    value,
                    hcl,
                    description=directive.description,
                )
            except requests.RequestException as e:
                return self._record(
                    self._result(workspace.name, directive, "error", f"Failed to update: {_describe(e)}")
                )
        return self._record(
            self._result(workspace.name, directive, action, f"id={existing.id} hcl={str(hcl).lower()}")
        )

    def _result(self, workspace_name: str, directive: ExportDirective, action: str, detail: str) -> ActionResult:
        return ActionResult(
            workspace=workspace_name,
            variable=directive.target_variable_name,
            source=directive.source_output_name,
            action=action,
            detail=detail,
            dry_run=self.dry_run and action.startswith("would_"),
        )

    def _record_missing(self, workspace_name: str, directive: ExportDirective) -> ActionResult:
        return self._record(
            self._result(
                workspace_name,
                directive,
                "missing_output",
                f"no output named '{directive.source_output_name}' (line {directive.line_number})",
            )
        )

    def _record(self, result: ActionResult) -> ActionResult:
        self.results.append(result)
        level = logging.ERROR if result.failed else logging.INFO

        handler = self.logger.handlers[0] if self.logger.handlers else None
        if handler and getattr(handler.formatter, "json_mode", False):
            # Log to structured logger
            record = self.logger.makeRecord("tfve", level, "", 0, "", (), None)
            record.action_result = result
            self.logger.handle(record)
        else:
            prefix = "[DRY-RUN] " if result.dry_run else ""
            self.logger.log(
                level,
                f"{prefix}{ICONS.get(result.action, '?')} [{result.workspace}] "
                f"{result.source} → {result.variable}: {result.action}"
                f"{' (' + result.detail + ')' if result.detail else ''}",
            )
        return result


def _describe(error: requests.RequestException) -> str:
    response = getattr(error, "response", None)
    if response is not None:
        return f"HTTP {response.status_code} {response.reason or ''}".rstrip()
    return str(error)
