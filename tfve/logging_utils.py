"""Logging utilities for tfve.

All messages go to stderr on the "tfve" logger. With --json, each exported
variable is one JSON line built from ActionResult.to_dict() (workspace,
variable, source output, action, detail); other messages become
{"level", "message"} lines.
"""

from __future__ import annotations

import json
import logging
import sys


class StructuredFormatter(logging.Formatter):
    """Formatter that emits JSON lines in json mode, `[LEVEL] message` otherwise."""

    def __init__(self, json_mode: bool = False):
        super().__init__()
        self.json_mode = json_mode

    def format(self, record: logging.LogRecord) -> str:
        if self.json_mode and hasattr(record, "action_result"):
            return json.dumps(record.action_result.to_dict())
        if self.json_mode:
            return json.dumps({"level": record.levelname, "message": record.getMessage()})
        return f"[{record.levelname:<7}] {record.getMessage()}"


def setup_logging(json_mode: bool = False, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("tfve")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    # Replace handlers from an earlier call
    for old in list(logger.handlers):
        logger.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(json_mode=json_mode))
    logger.addHandler(handler)
    return logger
