"""Export list parsing.

Each non-comment line maps an output to a workspace variable::

    # source,target[,description]
    vpc_id,network_vpc_id,VPC shared by all services
    subnet_ids,private_subnet_ids
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Iterable, Iterator

from tfve.errors import ExportListParseError
from tfve.models import ExportDirective


def parse_export_list(lines: Iterable[str]) -> list[ExportDirective]:
    """
    Parse export list lines into directives, in file order.

    Stops at the first malformed line and raises ExportListParseError.
    """
    directives = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        fields = [f.strip() for f in line.split(",")]
        if len(fields) not in (2, 3):
            raise ExportListParseError(line_number, line, f"expected 2 or 3 fields, got {len(fields)}")

        source, target = fields[0], fields[1]
        if not source:
            raise ExportListParseError(line_number, line, "empty source output name")
        if not target:
            raise ExportListParseError(line_number, line, "empty target variable name")

        description = fields[2] if len(fields) == 3 and fields[2] else None
        directives.append(
            ExportDirective(
                source_output_name=source,
                target_variable_name=target,
                description=description,
                line_number=line_number,
            )
        )
    return directives


def _decode_lines(f: BinaryIO) -> Iterator[str]:
    """Decode UTF-8 lines one by one so a bad byte is reported with its line number."""
    for line_number, raw in enumerate(f, start=1):
        # utf-8-sig drops a BOM at the start of the file
        encoding = "utf-8-sig" if line_number == 1 else "utf-8"
        try:
            yield raw.decode(encoding)
        except UnicodeDecodeError as e:
            line = raw.decode("utf-8", errors="replace").strip()
            raise ExportListParseError(line_number, line, f"not valid UTF-8 ({e.reason})") from e


def read_export_list(path: str | Path) -> list[ExportDirective]:
    with open(path, "rb") as f:
        return parse_export_list(_decode_lines(f))
