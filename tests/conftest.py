"""Shared test fixtures for tfve tests."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tfve.client import TerraformClient
from tfve.models import ConnectionSettings

# Constants for use in tests - pytest makes conftest.py fixtures available,
# but these constants need to be imported directly from tests
MOCK_BASE_URL = "https://tfe.example.com"
MOCK_API_URL = f"{MOCK_BASE_URL}/api/v2"
MOCK_ORG = "acme"


def make_workspace(ws_id: str, name: str, project_id: str | None = None) -> dict[str, Any]:
    """JSON:API workspace record."""
    ws: dict[str, Any] = {"id": ws_id, "type": "workspaces", "attributes": {"name": name}}
    if project_id:
        ws["relationships"] = {"project": {"data": {"id": project_id, "type": "projects"}}}
    return ws


def make_variable(var_id: str, key: str, value: str = "old", category: str = "terraform", **attrs) -> dict[str, Any]:
    """JSON:API variable record."""
    attributes = {
        "key": key,
        "value": value,
        "description": attrs.pop("description", None),
        "category": category,
        "hcl": attrs.pop("hcl", False),
        "sensitive": attrs.pop("sensitive", False),
    }
    return {"id": var_id, "type": "vars", "attributes": attributes}


def request_body(call) -> dict[str, Any]:
    return json.loads(call.request.body)


@pytest.fixture
def settings() -> ConnectionSettings:
    return ConnectionSettings(base_url=MOCK_BASE_URL, organization=MOCK_ORG, token="test-token")


@pytest.fixture
def mock_client(settings):
    """TerraformClient pointing at mock server, without throttling."""
    return TerraformClient(settings, dry_run=False, rate_limit=0)


@pytest.fixture
def dry_run_client(settings):
    """TerraformClient in dry-run mode."""
    return TerraformClient(settings, dry_run=True, rate_limit=0)


@pytest.fixture
def sample_outputs_document() -> dict[str, Any]:
    """`terraform output -json` document."""
    return {
        "bool": {"sensitive": False, "type": "bool", "value": False},
        "map_of_string": {
            "sensitive": False,
            "type": ["map", "string"],
            "value": {"a": "aaa", "b": "bbb", "c": "ccc"},
        },
        "number_0": {"sensitive": False, "type": "number", "value": 0},
        "number_float": {"sensitive": False, "type": "number", "value": 1.2345},
        "password": {"sensitive": True, "type": "string", "value": "hunter2"},
        "set_of_object": {
            "sensitive": False,
            "type": ["set", ["object", {"name": "string", "type": "string"}]],
            "value": [{"name": "aaa", "type": "bbb"}],
        },
        "string": {"sensitive": False, "type": "string", "value": "aaa"},
        "string_with_quote": {"sensitive": False, "type": "string", "value": 'aaa"bbb'},
        "tuple": {"sensitive": False, "type": ["tuple", ["string", "string"]], "value": ["aaa", "bbb"]},
    }


@pytest.fixture
def outputs_file(tmp_path, sample_outputs_document) -> Path:
    path = tmp_path / "outputs.json"
    path.write_text(json.dumps(sample_outputs_document), encoding="utf-8")
    return path


@pytest.fixture
def export_list_file(tmp_path) -> Path:
    path = tmp_path / "export_list.txt"
    path.write_text(
        "# output,variable[,description]\n"
        "\n"
        "string,string_out,string_description\n"
        "set_of_object,set_of_object_out\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers installed by main() so they don't outlive the captured streams."""
    yield
    logger = logging.getLogger("tfve")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
