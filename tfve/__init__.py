"""
tfve: Export Terraform output values to HCP Terraform workspace variables.

Reads `terraform output -json` (or a state file) and an export list, then creates
the listed variables on one or more workspaces. Existing variables are only
overwritten with --allow-update.

Environment:
    TFVE_ORGANIZATION_NAME - Organization name (required)
    TFVE_TOKEN             - API token (required)
    TFVE_BASE_URL          - API base URL (default: https://app.terraform.io)
"""

__version__ = "0.1.0"

from tfve.cli import main  # noqa: E402
from tfve.client import TerraformClient  # noqa: E402
from tfve.errors import ExportListParseError, OutputsFileError, TfveError  # noqa: E402
from tfve.export_list import parse_export_list, read_export_list  # noqa: E402
from tfve.models import ActionResult, ConnectionSettings, ExportDirective, OutputValue, ValueKind  # noqa: E402
from tfve.outputs import load_outputs, parse_outputs  # noqa: E402
from tfve.sync import Synchronizer  # noqa: E402

__all__ = [
    "main",
    "__version__",
    "TerraformClient",
    "Synchronizer",
    "ConnectionSettings",
    "ActionResult",
    "ExportDirective",
    "OutputValue",
    "ValueKind",
    "TfveError",
    "ExportListParseError",
    "OutputsFileError",
    "parse_export_list",
    "read_export_list",
    "load_outputs",
    "parse_outputs",
]
