"""Loading Terraform output values from JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tfve.errors import OutputsFileError
from tfve.models import OutputValue, ValueKind

logger = logging.getLogger("tfve")


def _extract_outputs(document: Any) -> dict:
    """
    Locate the outputs mapping in any of the supported layouts:

    - ``terraform output -json``: the document itself
    - ``terraform show -json``: ``values.outputs``
    - raw ``terraform.tfstate``: ``outputs``
    """
    if not isinstance(document, dict):
        raise OutputsFileError("Outputs file must contain a JSON object")

    values = document.get("values")
    if isinstance(values, dict) and "outputs" in values:
        return values["outputs"] or {}
    # An output may itself be called format_version; then it is a dict, not a string
    if isinstance(document.get("format_version"), str) and "values" not in document:
        # `terraform show -json` on an empty state
        return {}
    if isinstance(document.get("terraform_version"), str) and "outputs" in document:
        return document["outputs"] or {}
    return document


def parse_outputs(document: Any) -> dict[str, OutputValue]:
    """Build the name-keyed output set, skipping sensitive outputs."""
    outputs: dict[str, OutputValue] = {}
    for name, entry in _extract_outputs(document).items():
        if not isinstance(entry, dict) or "value" not in entry:
            raise OutputsFileError(f"Output '{name}' has no 'value' field")
        if entry.get("sensitive", False):
            logger.debug(f"Skipping sensitive output: {name}")
            continue

        value = entry["value"]
        kind = ValueKind.from_type(entry.get("type")) or ValueKind.from_value(value)
        if value is None:
            kind = ValueKind.STRUCTURED
        outputs[name] = OutputValue(name=name, value=value, kind=kind)
    return outputs


def load_outputs(path: str | Path) -> dict[str, OutputValue]:
    try:
        with open(path, encoding="utf-8-sig") as f:
            document = json.load(f)
    except UnicodeDecodeError as e:
        raise OutputsFileError(f"{path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise OutputsFileError(f"Invalid JSON in {path}: {e}") from e
    outputs = parse_outputs(document)
    logger.debug(f"Loaded {len(outputs)} outputs from {path}")
    return outputs


def format_outputs(outputs: dict[str, OutputValue]) -> str:
    """Render outputs for --show-outputs."""
    lines = [f"Number of outputs: {len(outputs)}."]
    for i, output in enumerate(sorted(outputs.values(), key=lambda o: o.name), start=1):
        lines.append(f"--- {i} ---")
        lines.append(f"name : {output.name}")
        lines.append(f"value: {json.dumps(output.value, separators=(',', ':'), ensure_ascii=False)}")
    return "\n".join(lines)
