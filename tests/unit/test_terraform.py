"""Unit tests for stack_deploy.terraform."""

from __future__ import annotations

from pathlib import Path

import pytest

from stack_deploy.exceptions import ExecutionFailure
from stack_deploy.models import Environment, RunConfig
from stack_deploy.terraform import (
    apply_command,
    ensure_workspace,
    parse_workspaces,
    workspace_action,
)
from tests.mocks.fake_runner import RecordingRunner

_CWD = Path("/work/infrastructure")
_LIST = ("terraform", "workspace", "list")


def test_parse_workspaces_strips_current_marker() -> None:
    listing = "  default\n* dev\n  test\n\n  prod\n"
    assert parse_workspaces(listing) == ["default", "dev", "test", "prod"]


def test_parse_workspaces_marker_without_space() -> None:
    assert parse_workspaces("dev\n*test\nprod\n") == ["dev", "test", "prod"]


def test_parse_workspaces_empty_listing() -> None:
    assert parse_workspaces("") == []


def test_workspace_action_select_when_present() -> None:
    assert workspace_action(["dev", "test", "prod"], "test") == "select"


def test_workspace_action_new_when_absent() -> None:
    assert workspace_action(["default", "dev"], "prod") == "new"


def test_workspace_action_requires_exact_match() -> None:
    assert workspace_action(["testing", "dev-old"], "test") == "new"


@pytest.mark.parametrize(
    ("listing", "target", "expected"),
    [
        ("dev\n*test\nprod\n", "test", "select"),
        ("* default\n  dev\n", "prod", "new"),
        ("", "dev", "new"),
    ],
)
def test_ensure_workspace_runs_exactly_one_action(
    listing: str, target: str, expected: str
) -> None:
    runner = RecordingRunner(outputs={_LIST: listing})

    action = ensure_workspace(runner, target, cwd=_CWD)

    assert action == expected
    assert runner.argvs == [list(_LIST), ["terraform", "workspace", expected, target]]
    assert all(call.cwd == _CWD for call in runner.calls)


def test_ensure_workspace_list_failure_stops_before_select() -> None:
    runner = RecordingRunner(exit_codes={_LIST: 1})
    with pytest.raises(ExecutionFailure):
        ensure_workspace(runner, "dev", cwd=_CWD)
    assert runner.argvs == [list(_LIST)]


def test_apply_prod_includes_var_file() -> None:
    run = RunConfig(env=Environment.PROD, project_name="shop")
    command = apply_command(run, prod_var_file="environments/prod.tfvars")
    assert command.argv == [
        "terraform",
        "apply",
        "-auto-approve",
        "-input=false",
        "-var-file=environments/prod.tfvars",
        "-var",
        "project_name=shop",
        "-var",
        "environment=prod",
    ]


@pytest.mark.parametrize("env", [Environment.DEV, Environment.TEST])
def test_apply_non_prod_has_no_var_file(env: Environment) -> None:
    run = RunConfig(env=env, project_name="shop")
    command = apply_command(run, prod_var_file="environments/prod.tfvars")
    assert not any(arg.startswith("-var-file") for arg in command.args)
    assert f"environment={env}" in command.args
    assert "project_name=shop" in command.args


def test_apply_display_quotes_arguments_with_spaces() -> None:
    run = RunConfig(env=Environment.DEV, project_name="my shop")
    command = apply_command(run, prod_var_file="environments/prod.tfvars")
    assert command.display() == (
        "terraform apply -auto-approve -input=false "
        "-var 'project_name=my shop' -var environment=dev"
    )
