"""
stack_deploy.frontend — Build the SPA and mirror it to S3.

The API URL is baked in at build time through a dotenv file, so it must be
written before ``npm run build``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stack_deploy.models import CommandInvocation

logger = logging.getLogger(__name__)

API_URL_ENV_KEY = "NEXT_PUBLIC_API_URL"


def write_env_file(frontend_dir: Path, filename: str, api_url: str) -> Path:
    """Write ``NEXT_PUBLIC_API_URL=<api_url>`` into the frontend env file."""
    path = frontend_dir / filename
    path.write_text(f"{API_URL_ENV_KEY}={api_url}\n", encoding="utf-8")
    logger.info("Wrote %s", path)
    return path


def install_command() -> CommandInvocation:
    return CommandInvocation(
        program="npm",
        args=("install",),
        message="Frontend dependency install failed",
    )


def build_command() -> CommandInvocation:
    return CommandInvocation(
        program="npm",
        args=("run", "build"),
        message="Frontend build failed",
    )


def sync_command(build_dir: str, bucket_name: str) -> CommandInvocation:
    """Mirror the build output to the bucket; remote extras are deleted."""
    return CommandInvocation(
        program="aws",
        args=("s3", "sync", build_dir, f"s3://{bucket_name}", "--delete"),
        message=f"S3 sync to {bucket_name} failed",
    )
