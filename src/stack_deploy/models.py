"""
stack_deploy.models — Values passed between deployment stages.

All entities live for a single run only. Nothing here is persisted.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from enum import StrEnum

# ---------------------------------------------------------------------------
# Environments
# ---------------------------------------------------------------------------


class Environment(StrEnum):
    DEV = "dev"
    TEST = "test"
    PROD = "prod"


DEFAULT_ENV = Environment.DEV
DEFAULT_PROJECT_NAME = "serverless-app"

# Only production ships a dedicated Terraform var file.
PRODUCTION_ENV = Environment.PROD


# ---------------------------------------------------------------------------
# Terraform output names
# ---------------------------------------------------------------------------

OUTPUT_API_URL = "api_url"
OUTPUT_BUCKET_NAME = "s3_bucket_name"
OUTPUT_CUSTOM_DOMAIN_URL = "custom_domain_url"
OUTPUT_CLOUDFRONT_URL = "cloudfront_url"
OUTPUT_DISTRIBUTION_ID = "cloudfront_distribution_id"


# ---------------------------------------------------------------------------
# Run-scoped values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunConfig:
    env: Environment
    project_name: str

    @property
    def is_production(self) -> bool:
        return self.env == PRODUCTION_ENV


@dataclass(frozen=True)
class CommandInvocation:
    program: str
    args: tuple[str, ...] = ()
    message: str = ""

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def display(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class OutputValue:
    name: str
    value: str
    allow_empty: bool = False


@dataclass
class DeployOutputs:
    """Terraform outputs collected as the run progresses."""

    api_url: str = ""
    bucket_name: str = ""
    custom_domain_url: str = ""
    cloudfront_url: str = ""
    distribution_id: str = ""
