"""
stack_deploy.config — Deployment settings read from the environment.

Directory layout, build commands and optional features are all overridable
through DEPLOY_* variables so the same tool can drive differently shaped
repositories. Defaults match the conventional layout:

    <root>/backend          backend sources + packaging command
    <root>/infrastructure   Terraform root module
    <root>/frontend         Next.js app, static export under out/
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_BACKEND_DIR = "backend"
DEFAULT_INFRA_DIR = "infrastructure"
DEFAULT_FRONTEND_DIR = "frontend"
DEFAULT_BACKEND_BUILD = "make package"
DEFAULT_PROD_VAR_FILE = "environments/prod.tfvars"
DEFAULT_FRONTEND_ENV_FILE = ".env.production"
DEFAULT_FRONTEND_BUILD_DIR = "out"
DEFAULT_REPORT_KEY = "deploy-report.json"

OUTPUT_FORMATS: tuple[str, ...] = ("json", "raw")
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class DeploySettings:
    root: Path
    backend_dir: Path
    infra_dir: Path
    frontend_dir: Path
    backend_build: tuple[str, ...]
    prod_var_file: str
    frontend_env_file: str
    frontend_build_dir: str
    output_format: str = "json"
    invalidate_cdn: bool = False
    report_path: Path | None = None
    report_bucket: str | None = None
    report_key: str = DEFAULT_REPORT_KEY
    log_level: int = logging.INFO


def _get(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name, "").strip()
    return value or default


def _flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in _TRUTHY


def _resolve_dir(root: Path, raw: str) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else root / path


def parse_log_level(raw: str) -> int:
    """Map a level name ("debug", "INFO", ...) to its logging constant."""
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {raw!r}")
    return level


def load_settings(environ: Mapping[str, str] | None = None) -> DeploySettings:
    """Build settings from DEPLOY_* environment variables."""
    env = os.environ if environ is None else environ

    root = Path(_get(env, "DEPLOY_ROOT", os.getcwd())).expanduser().resolve()

    backend_build = tuple(shlex.split(_get(env, "DEPLOY_BACKEND_BUILD", DEFAULT_BACKEND_BUILD)))
    if not backend_build:
        raise ValueError("DEPLOY_BACKEND_BUILD must name a command")

    output_format = _get(env, "DEPLOY_OUTPUT_FORMAT", "json").lower()
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"DEPLOY_OUTPUT_FORMAT must be one of {', '.join(OUTPUT_FORMATS)}, "
            f"got {output_format!r}"
        )

    report_path_raw = env.get("DEPLOY_REPORT_PATH", "").strip()
    report_bucket = env.get("DEPLOY_REPORT_BUCKET", "").strip() or None

    return DeploySettings(
        root=root,
        backend_dir=_resolve_dir(root, _get(env, "DEPLOY_BACKEND_DIR", DEFAULT_BACKEND_DIR)),
        infra_dir=_resolve_dir(root, _get(env, "DEPLOY_INFRA_DIR", DEFAULT_INFRA_DIR)),
        frontend_dir=_resolve_dir(root, _get(env, "DEPLOY_FRONTEND_DIR", DEFAULT_FRONTEND_DIR)),
        backend_build=backend_build,
        prod_var_file=_get(env, "DEPLOY_PROD_VAR_FILE", DEFAULT_PROD_VAR_FILE),
        frontend_env_file=_get(env, "DEPLOY_FRONTEND_ENV_FILE", DEFAULT_FRONTEND_ENV_FILE),
        frontend_build_dir=_get(env, "DEPLOY_FRONTEND_BUILD_DIR", DEFAULT_FRONTEND_BUILD_DIR),
        output_format=output_format,
        invalidate_cdn=_flag(env, "DEPLOY_INVALIDATE_CDN"),
        report_path=_resolve_dir(root, report_path_raw) if report_path_raw else None,
        report_bucket=report_bucket,
        report_key=_get(env, "DEPLOY_REPORT_KEY", DEFAULT_REPORT_KEY),
        log_level=parse_log_level(_get(env, "DEPLOY_LOG_LEVEL", "INFO")),
    )


def require_aws_region(environ: Mapping[str, str] | None = None) -> str:
    """Read AWS_REGION from environment and fail fast if missing."""
    env = os.environ if environ is None else environ
    region = env.get("AWS_REGION", "").strip()
    if not region:
        raise RuntimeError("AWS_REGION must be set")
    return region
