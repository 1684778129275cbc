"""
stack_deploy.exceptions — Deployment failure taxonomy.

Every failure is fatal: it propagates to the CLI entrypoint, which logs it
and exits non-zero. The only place a failure is downgraded is the optional
custom-domain output read in the orchestrator.
"""

from __future__ import annotations


class DeployError(RuntimeError):
    """Base class for deployment failures."""


class ExecutionFailure(DeployError):
    """Raised when an external command exits with a non-zero status.

    Attributes:
        message:   Caller-supplied context, e.g. "Terraform apply failed".
        exit_code: Exit status of the child process (127 when the program
                   could not be found on PATH).
    """

    def __init__(self, *, message: str, exit_code: int) -> None:
        self.message = message
        self.exit_code = exit_code
        super().__init__(f"{message} (exit code {exit_code})")


class MissingOutput(DeployError):
    """Raised when a required Terraform output is empty."""

    def __init__(self, *, name: str) -> None:
        self.name = name
        super().__init__(f"Terraform output {name!r} is empty")


class InvalidOutput(DeployError):
    """Raised when a Terraform output query returned something other than a value.

    Usually a warning banner (e.g. "Warning: No outputs found") printed in
    place of the value, or a structured value that is not a scalar.
    """

    def __init__(self, *, name: str, value: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Terraform output {name!r} is not a usable value: {value[:200]!r}")
