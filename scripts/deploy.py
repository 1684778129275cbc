"""
deploy.py — Full-stack deploy: backend package, Terraform apply, SPA publish.

Stages (stop on first failure):
    1. Build the backend package      (DEPLOY_BACKEND_BUILD in backend/)
    2. terraform init / workspace / apply in infrastructure/
    3. Read api_url, s3_bucket_name, custom_domain_url outputs
    4. Write frontend/.env.production, npm install, npm run build,
       aws s3 sync out/ s3://<bucket> --delete
    5. Print API / CloudFront / custom-domain URLs

Usage:
    uv run python scripts/deploy.py --env <env> --project-name <name>

Configuration is read from DEPLOY_* environment variables; see
stack_deploy.config.
"""

from __future__ import annotations

from stack_deploy.cli import main, parse_args

__all__ = ["main", "parse_args"]

if __name__ == "__main__":
    raise SystemExit(main())
