"""
stack_deploy.terraform — Terraform init / workspace / apply commands.

Workspaces are named after the environment. ``terraform workspace list``
prints one name per line with the current one prefixed by "*":

      default
    * dev
      prod
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from stack_deploy.models import CommandInvocation, RunConfig
from stack_deploy.runner import CommandRunner

logger = logging.getLogger(__name__)

TERRAFORM = "terraform"
CURRENT_WORKSPACE_MARKER = "*"

WorkspaceAction = Literal["select", "new"]


def parse_workspaces(listing: str) -> list[str]:
    """Parse ``terraform workspace list`` output into bare names."""
    names: list[str] = []
    for line in listing.splitlines():
        name = line.strip()
        if name.startswith(CURRENT_WORKSPACE_MARKER):
            name = name[len(CURRENT_WORKSPACE_MARKER) :].strip()
        if name:
            names.append(name)
    return names


def workspace_action(existing: list[str], target: str) -> WorkspaceAction:
    return "select" if target in existing else "new"


def init_command() -> CommandInvocation:
    return CommandInvocation(
        program=TERRAFORM,
        args=("init", "-input=false", "-no-color"),
        message="Terraform init failed",
    )


def workspace_list_command() -> CommandInvocation:
    return CommandInvocation(
        program=TERRAFORM,
        args=("workspace", "list"),
        message="Failed to list Terraform workspaces",
    )


def workspace_command(action: WorkspaceAction, name: str) -> CommandInvocation:
    verb = "select" if action == "select" else "create"
    return CommandInvocation(
        program=TERRAFORM,
        args=("workspace", action, name),
        message=f"Failed to {verb} Terraform workspace {name!r}",
    )


def apply_command(run: RunConfig, *, prod_var_file: str) -> CommandInvocation:
    """Build the apply invocation; only production passes a var file."""
    args = ["apply", "-auto-approve", "-input=false"]
    if run.is_production:
        args.append(f"-var-file={prod_var_file}")
    args.extend(
        [
            "-var",
            f"project_name={run.project_name}",
            "-var",
            f"environment={run.env}",
        ]
    )
    return CommandInvocation(program=TERRAFORM, args=tuple(args), message="Terraform apply failed")


def ensure_workspace(runner: CommandRunner, name: str, *, cwd: Path) -> WorkspaceAction:
    """Select workspace ``name`` if it exists, otherwise create it."""
    listing = runner.capture(workspace_list_command(), cwd=cwd)
    action = workspace_action(parse_workspaces(listing), name)
    logger.info("Workspace %s: %s", name, "selecting" if action == "select" else "creating")
    runner.run(workspace_command(action, name), cwd=cwd)
    return action
