"""
stack_deploy.cli — Command-line entrypoint.

Usage:
    stack-deploy [--env {dev,test,prod}] [--project-name NAME]

Exit codes:
    0    Deployment completed
    N    An external command failed with exit status N (1-255)
    1    Any other failure (missing/invalid output, bad configuration)
"""

from __future__ import annotations

import argparse
import logging

from stack_deploy.config import load_settings
from stack_deploy.exceptions import ExecutionFailure
from stack_deploy.models import DEFAULT_ENV, DEFAULT_PROJECT_NAME, Environment, RunConfig
from stack_deploy.orchestrator import run_deploy

logger = logging.getLogger("stack_deploy")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _project_name(raw: str) -> str:
    value = raw.strip()
    if not value:
        raise argparse.ArgumentTypeError("project name must not be empty")
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Build the backend, apply Terraform, and publish the frontend"
    )
    parser.add_argument(
        "--env",
        default=str(DEFAULT_ENV),
        choices=[str(env) for env in Environment],
        help="Target environment (default: %(default)s)",
    )
    parser.add_argument(
        "--project-name",
        default=DEFAULT_PROJECT_NAME,
        type=_project_name,
        help="Project name passed to Terraform (default: %(default)s)",
    )
    return parser.parse_args(argv)


def exit_code_for(exc: Exception) -> int:
    """Propagate a failing command's status; everything else exits 1."""
    if isinstance(exc, ExecutionFailure) and 0 < exc.exit_code < 256:
        return exc.exit_code
    return 1


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("Invalid configuration: %s", exc)
        return 1

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    run = RunConfig(env=Environment(args.env), project_name=args.project_name)

    try:
        run_deploy(run, settings)
    except Exception as exc:
        logger.error("Deploy failed: %s", exc)
        return exit_code_for(exc)

    logger.info("Deploy of %s (%s) completed", run.project_name, run.env)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
