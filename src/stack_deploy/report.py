"""
stack_deploy.report — Per-stage run report.

Each stage appends one record with its status and timings. When a report
path and/or bucket is configured, the report is persisted after every stage
so a failed run still leaves a record of how far it got.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import boto3

from stack_deploy.models import RunConfig

logger = logging.getLogger(__name__)

REPORT_CONTENT_TYPE = "application/json"


def utc_now_iso() -> str:
    """Return current UTC timestamp in ISO-8601 format."""
    return datetime.now(tz=UTC).isoformat()


def initial_report(run: RunConfig) -> dict[str, Any]:
    return {
        "environment": str(run.env),
        "projectName": run.project_name,
        "startedAt": utc_now_iso(),
        "updatedAt": utc_now_iso(),
        "stages": [],
    }


def render_report(report: dict[str, Any]) -> bytes:
    report["updatedAt"] = utc_now_iso()
    return json.dumps(report, indent=2, sort_keys=True).encode("utf-8")


def write_report_file(path: Path, report: dict[str, Any]) -> Path:
    """Write the report JSON to a local file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(render_report(report))
    logger.debug("Wrote deploy report: %s", path)
    return path


def s3_client(aws_region: str) -> Any:
    return boto3.client("s3", region_name=aws_region)


def upload_report(s3: Any, *, bucket: str, key: str, report: dict[str, Any]) -> str:
    """Write the report JSON to S3 and return its URI."""
    s3.put_object(
        Bucket=bucket,
        Key=key,
        Body=render_report(report),
        ContentType=REPORT_CONTENT_TYPE,
    )
    s3_uri = f"s3://{bucket}/{key}"
    logger.debug("Wrote deploy report: %s", s3_uri)
    return s3_uri
