"""
stack_deploy.runner — External command execution.

Commands are passed as argv lists (no shell). ``run`` streams the child's
output straight to the operator's terminal; ``capture`` collects it for the
Terraform output queries. Both check the exit status before returning.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path

from stack_deploy.exceptions import ExecutionFailure
from stack_deploy.models import CommandInvocation

logger = logging.getLogger(__name__)

# Shell convention for "command not found".
EXIT_COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Runs external programs and raises ExecutionFailure on non-zero exit."""

    def resolve(self, program: str, *, cwd: Path | None = None) -> str | None:
        """Return the full path of ``program``, or None.

        A bare name is looked up on PATH. A name with a directory part is
        taken relative to ``cwd``, matching how ``run`` starts it.
        """
        if os.sep not in program and not (os.altsep and os.altsep in program):
            return shutil.which(program)
        path = Path(program)
        if not path.is_absolute() and cwd is not None:
            path = Path(cwd) / path
        if path.is_file() and os.access(path, os.X_OK):
            return str(path)
        return None

    def run(self, invocation: CommandInvocation, *, cwd: Path) -> None:
        """Run a command with inherited stdout/stderr and wait for it."""
        logger.info("Running: %s", invocation.display())
        try:
            result = subprocess.run(invocation.argv, cwd=str(cwd), check=False)
        except FileNotFoundError as exc:
            raise ExecutionFailure(
                message=f"{invocation.message}: {invocation.program} not found",
                exit_code=EXIT_COMMAND_NOT_FOUND,
            ) from exc

        if result.returncode != 0:
            raise ExecutionFailure(message=invocation.message, exit_code=result.returncode)

    def capture(
        self,
        invocation: CommandInvocation,
        *,
        cwd: Path,
        combine_stderr: bool = False,
    ) -> str:
        """Run a read-only query and return its output text.

        With ``combine_stderr`` the child's stderr is folded into the returned
        text; otherwise stderr stays attached to the terminal.
        """
        logger.info("Running: %s", invocation.display())
        try:
            result = subprocess.run(
                invocation.argv,
                cwd=str(cwd),
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if combine_stderr else None,
                text=True,
            )
        except FileNotFoundError as exc:
            raise ExecutionFailure(
                message=f"{invocation.message}: {invocation.program} not found",
                exit_code=EXIT_COMMAND_NOT_FOUND,
            ) from exc

        if result.returncode != 0:
            raise ExecutionFailure(message=invocation.message, exit_code=result.returncode)
        return result.stdout or ""


def missing_programs(
    runner: CommandRunner, programs: Iterable[str], *, cwd: Path | None = None
) -> list[str]:
    """Return the programs that do not resolve, in input order."""
    return [name for name in dict.fromkeys(programs) if runner.resolve(name, cwd=cwd) is None]


def ensure_programs(
    runner: CommandRunner, programs: Iterable[str], *, cwd: Path | None = None
) -> list[str]:
    """Fail fast when any required tool is missing."""
    required = list(dict.fromkeys(programs))
    missing = missing_programs(runner, required, cwd=cwd)
    if missing:
        raise ExecutionFailure(
            message=f"Required tools not found: {', '.join(missing)}",
            exit_code=EXIT_COMMAND_NOT_FOUND,
        )
    return required
