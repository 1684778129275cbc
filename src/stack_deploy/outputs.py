"""
stack_deploy.outputs — Read single Terraform outputs and validate them.

Two query formats are supported:

    json  terraform output -json -no-color <name>
          The value is JSON-decoded, so a degraded response (warning banner,
          map/list value) is detected structurally. Default.

    raw   terraform output -raw -no-color <name>   (stderr merged)
          Unstructured text. The only degradation signal is a value that
          starts with "Warning:", which is a known limitation: a genuine
          value with that prefix is indistinguishable from a warning.

In both formats the final string is whitespace-trimmed, rejected when it
starts with "Warning:", and rejected when empty unless the caller allows it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from stack_deploy.exceptions import InvalidOutput, MissingOutput
from stack_deploy.models import CommandInvocation, OutputValue
from stack_deploy.runner import CommandRunner

logger = logging.getLogger(__name__)

WARNING_PREFIX = "Warning:"
TERRAFORM = "terraform"


def validate_output(name: str, raw: str, allow_empty: bool = False) -> str:
    """Trim ``raw`` and apply the empty/warning rules. Returns the trimmed value."""
    value = raw.strip()
    if not value:
        if allow_empty:
            return ""
        raise MissingOutput(name=name)
    if value.startswith(WARNING_PREFIX):
        raise InvalidOutput(name=name, value=value)
    return value


def decode_json_output(name: str, raw: str) -> str:
    """Decode ``terraform output -json`` text into a plain string.

    null decodes to "" and scalars are stringified; anything that is not
    JSON, or is a list/map, is an InvalidOutput.
    """
    text = raw.strip()
    if not text:
        return ""
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidOutput(name=name, value=text) from exc

    if decoded is None:
        return ""
    if isinstance(decoded, str):
        return decoded
    if isinstance(decoded, bool):
        return "true" if decoded else "false"
    if isinstance(decoded, int | float):
        return str(decoded)
    raise InvalidOutput(name=name, value=text)


class OutputReader:
    """Reads one named output at a time from the Terraform state."""

    def __init__(self, runner: CommandRunner, *, output_format: str = "json") -> None:
        if output_format not in ("json", "raw"):
            raise ValueError(f"Unsupported output format: {output_format!r}")
        self._runner = runner
        self._format = output_format

    def query(self, name: str) -> CommandInvocation:
        return CommandInvocation(
            program=TERRAFORM,
            args=("output", f"-{self._format}", "-no-color", name),
            message=f"Failed to read Terraform output {name!r}",
        )

    def read(self, name: str, *, cwd: Path, allow_empty: bool = False) -> OutputValue:
        # Exit status is checked inside capture(), before any content checks.
        raw = self._runner.capture(
            self.query(name),
            cwd=cwd,
            combine_stderr=self._format == "raw",
        )
        if self._format == "json":
            raw = decode_json_output(name, raw)
        value = validate_output(name, raw, allow_empty)
        logger.debug("Output %s=%r", name, value)
        return OutputValue(name=name, value=value, allow_empty=allow_empty)
