"""
stack_deploy.orchestrator — Ordered deployment stages.

    preflight  required tools resolve on PATH
    package    backend build command in the backend directory
    provision  terraform init, workspace select/new, apply
    outputs    api_url, s3_bucket_name, custom_domain_url (best effort)
    publish    env file, npm install, npm run build, aws s3 sync --delete
    summary    cloudfront_url + printed summary

Stages run strictly in order. The first failure is recorded in the run
report and re-raised; nothing after it runs and nothing before it is rolled
back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from stack_deploy.cdn import cloudfront_client, invalidate_distribution
from stack_deploy.config import DeploySettings, require_aws_region
from stack_deploy.dirstack import DirectoryStack
from stack_deploy.frontend import build_command, install_command, sync_command, write_env_file
from stack_deploy.models import (
    OUTPUT_API_URL,
    OUTPUT_BUCKET_NAME,
    OUTPUT_CLOUDFRONT_URL,
    OUTPUT_CUSTOM_DOMAIN_URL,
    OUTPUT_DISTRIBUTION_ID,
    CommandInvocation,
    DeployOutputs,
    RunConfig,
)
from stack_deploy.outputs import OutputReader
from stack_deploy.report import (
    initial_report,
    s3_client,
    upload_report,
    utc_now_iso,
    write_report_file,
)
from stack_deploy.runner import CommandRunner, ensure_programs
from stack_deploy.terraform import TERRAFORM, apply_command, ensure_workspace, init_command

logger = logging.getLogger(__name__)

STAGE_ORDER: tuple[str, ...] = (
    "preflight",
    "package",
    "provision",
    "outputs",
    "publish",
    "summary",
)


@dataclass
class DeployContext:
    run: RunConfig
    settings: DeploySettings
    runner: CommandRunner
    reader: OutputReader
    dirs: DirectoryStack
    outputs: DeployOutputs = field(default_factory=DeployOutputs)
    cloudfront: Any = None
    s3: Any = None


StageHandler = Callable[[DeployContext], dict[str, Any]]


def backend_build_command(settings: DeploySettings) -> CommandInvocation:
    program, *args = settings.backend_build
    return CommandInvocation(
        program=program,
        args=tuple(args),
        message="Backend package build failed",
    )


def required_programs(settings: DeploySettings) -> list[str]:
    return [settings.backend_build[0], TERRAFORM, "npm", "aws"]


def read_optional_output(ctx: DeployContext, name: str) -> str:
    """Read an output that may be absent; any failure yields ""."""
    try:
        return ctx.reader.read(name, cwd=ctx.dirs.current, allow_empty=True).value
    except Exception as exc:
        logger.warning("Optional output %s unavailable, treating as empty: %s", name, exc)
        return ""


def render_summary(run: RunConfig, outputs: DeployOutputs) -> list[str]:
    lines = [
        f"Deployment complete: {run.project_name} ({run.env})",
        f"  API URL:        {outputs.api_url}",
        f"  CloudFront URL: {outputs.cloudfront_url}",
    ]
    if outputs.custom_domain_url:
        lines.append(f"  Custom domain:  {outputs.custom_domain_url}")
    return lines


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def stage_preflight(ctx: DeployContext) -> dict[str, Any]:
    """Check every external tool resolves before touching anything."""
    # Only the backend build command may be a relative path; it runs there.
    programs = ensure_programs(
        ctx.runner, required_programs(ctx.settings), cwd=ctx.settings.backend_dir
    )
    return {"programs": programs}


def stage_package(ctx: DeployContext) -> dict[str, Any]:
    """Build the deployable backend artifact."""
    command = backend_build_command(ctx.settings)
    with ctx.dirs.enter(ctx.settings.backend_dir) as cwd:
        ctx.runner.run(command, cwd=cwd)
    return {"command": command.display()}


def stage_provision(ctx: DeployContext) -> dict[str, Any]:
    """terraform init, select or create the env workspace, then apply."""
    workspace = str(ctx.run.env)
    command = apply_command(ctx.run, prod_var_file=ctx.settings.prod_var_file)
    with ctx.dirs.enter(ctx.settings.infra_dir) as cwd:
        ctx.runner.run(init_command(), cwd=cwd)
        action = ensure_workspace(ctx.runner, workspace, cwd=cwd)
        ctx.runner.run(command, cwd=cwd)
    return {
        "workspace": workspace,
        "workspaceAction": action,
        "apply": command.display(),
    }


def stage_outputs(ctx: DeployContext) -> dict[str, Any]:
    """Read the values the publish stage depends on."""
    with ctx.dirs.enter(ctx.settings.infra_dir) as cwd:
        ctx.outputs.api_url = ctx.reader.read(OUTPUT_API_URL, cwd=cwd).value
        ctx.outputs.bucket_name = ctx.reader.read(OUTPUT_BUCKET_NAME, cwd=cwd).value
        ctx.outputs.custom_domain_url = read_optional_output(ctx, OUTPUT_CUSTOM_DOMAIN_URL)
        if ctx.settings.invalidate_cdn:
            ctx.outputs.distribution_id = ctx.reader.read(OUTPUT_DISTRIBUTION_ID, cwd=cwd).value

    return {
        "apiUrl": ctx.outputs.api_url,
        "bucketName": ctx.outputs.bucket_name,
        "customDomainUrl": ctx.outputs.custom_domain_url,
    }


def stage_publish(ctx: DeployContext) -> dict[str, Any]:
    """Build the frontend against the new API URL and mirror it to S3."""
    settings = ctx.settings
    with ctx.dirs.enter(settings.frontend_dir) as cwd:
        env_file = write_env_file(cwd, settings.frontend_env_file, ctx.outputs.api_url)
        ctx.runner.run(install_command(), cwd=cwd)
        ctx.runner.run(build_command(), cwd=cwd)
        ctx.runner.run(
            sync_command(settings.frontend_build_dir, ctx.outputs.bucket_name),
            cwd=cwd,
        )

    details: dict[str, Any] = {
        "envFile": str(env_file),
        "bucket": f"s3://{ctx.outputs.bucket_name}",
    }
    if settings.invalidate_cdn:
        if ctx.cloudfront is None:
            ctx.cloudfront = cloudfront_client(require_aws_region())
        details["invalidationId"] = invalidate_distribution(
            ctx.cloudfront, ctx.outputs.distribution_id
        )
    return details


def stage_summary(ctx: DeployContext) -> dict[str, Any]:
    """Read the CDN URL and print where everything landed."""
    with ctx.dirs.enter(ctx.settings.infra_dir) as cwd:
        ctx.outputs.cloudfront_url = ctx.reader.read(OUTPUT_CLOUDFRONT_URL, cwd=cwd).value

    for line in render_summary(ctx.run, ctx.outputs):
        print(line)
    return {"cloudfrontUrl": ctx.outputs.cloudfront_url}


STAGE_HANDLERS: dict[str, StageHandler] = {
    "preflight": stage_preflight,
    "package": stage_package,
    "provision": stage_provision,
    "outputs": stage_outputs,
    "publish": stage_publish,
    "summary": stage_summary,
}


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def persist_report(ctx: DeployContext, report: dict[str, Any]) -> None:
    """Write the report wherever the settings ask for it (possibly nowhere)."""
    settings = ctx.settings
    if settings.report_path is not None:
        write_report_file(settings.report_path, report)
    if settings.report_bucket:
        if ctx.s3 is None:
            ctx.s3 = s3_client(require_aws_region())
        upload_report(
            ctx.s3,
            bucket=settings.report_bucket,
            key=settings.report_key,
            report=report,
        )


def execute_stage(*, stage_name: str, ctx: DeployContext, report: dict[str, Any]) -> None:
    """Execute one stage and record its outcome in the report."""
    handler = STAGE_HANDLERS[stage_name]
    started_at = utc_now_iso()
    status = "passed"
    details: dict[str, Any] = {}

    try:
        details = handler(ctx)
    except Exception as exc:
        status = "failed"
        details = {
            "errorType": exc.__class__.__name__,
            "errorMessage": str(exc),
        }
        raise
    finally:
        report.setdefault("stages", []).append(
            {
                "stage": stage_name,
                "status": status,
                "startedAt": started_at,
                "completedAt": utc_now_iso(),
                "details": details,
            }
        )
        try:
            persist_report(ctx, report)
        except Exception as exc:
            logger.warning("Failed to persist deploy report after %s: %s", stage_name, exc)


def build_context(
    run: RunConfig,
    settings: DeploySettings,
    *,
    runner: CommandRunner | None = None,
    cloudfront: Any = None,
    s3: Any = None,
) -> DeployContext:
    runner = runner or CommandRunner()
    return DeployContext(
        run=run,
        settings=settings,
        runner=runner,
        reader=OutputReader(runner, output_format=settings.output_format),
        dirs=DirectoryStack(settings.root),
        cloudfront=cloudfront,
        s3=s3,
    )


def run_deploy(
    run: RunConfig,
    settings: DeploySettings,
    *,
    runner: CommandRunner | None = None,
    cloudfront: Any = None,
    s3: Any = None,
) -> DeployContext:
    """Run every stage in order; returns the context with collected outputs."""
    ctx = build_context(run, settings, runner=runner, cloudfront=cloudfront, s3=s3)
    report = initial_report(run)
    logger.info("Deploying %s to %s", run.project_name, run.env)

    for stage_name in STAGE_ORDER:
        logger.info("==> Stage: %s", stage_name)
        execute_stage(stage_name=stage_name, ctx=ctx, report=report)

    return ctx
