"""
stack_deploy.cdn — CloudFront cache invalidation after a publish.

Opt-in via DEPLOY_INVALIDATE_CDN. The distribution ID comes from the
``cloudfront_distribution_id`` Terraform output.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import boto3

logger = logging.getLogger(__name__)

INVALIDATION_PATHS: tuple[str, ...] = ("/*",)


def cloudfront_client(aws_region: str) -> Any:
    return boto3.client("cloudfront", region_name=aws_region)


def invalidate_distribution(
    cloudfront: Any,
    distribution_id: str,
    *,
    paths: tuple[str, ...] = INVALIDATION_PATHS,
    caller_reference: str | None = None,
) -> str:
    """Create an invalidation for ``paths``; returns the invalidation ID."""
    reference = caller_reference or f"stack-deploy-{int(time.time() * 1000)}"
    response = cloudfront.create_invalidation(
        DistributionId=distribution_id,
        InvalidationBatch={
            "Paths": {"Quantity": len(paths), "Items": list(paths)},
            "CallerReference": reference,
        },
    )
    invalidation_id = str(response["Invalidation"]["Id"])
    logger.info(
        "Created CloudFront invalidation %s for %s (%s)",
        invalidation_id,
        distribution_id,
        ", ".join(paths),
    )
    return invalidation_id
