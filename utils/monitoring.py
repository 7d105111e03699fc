"""
Monitoring and observability utilities with Sentry and Prometheus integration
"""

import os
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from prometheus_client import Counter, Histogram, CollectorRegistry

from utils.config import Config

# Dedicated registry so /metrics only exposes application metrics
registry = CollectorRegistry()

REQUEST_COUNT = Counter(
    'multimediablast_requests_total',
    'Total number of requests',
    ['method', 'endpoint', 'status_code'],
    registry=registry
)

REQUEST_DURATION = Histogram(
    'multimediablast_request_duration_seconds',
    'Request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

ACCOUNT_LINKS = Counter(
    'multimediablast_account_links_total',
    'OAuth account link attempts',
    ['platform', 'outcome'],
    registry=registry
)

PUBLISH_ATTEMPTS = Counter(
    'multimediablast_publish_attempts_total',
    'Per-destination publish attempts',
    ['platform', 'status'],
    registry=registry
)

POST_SUBMISSIONS = Counter(
    'multimediablast_post_submissions_total',
    'Post submissions by resulting status',
    ['status'],
    registry=registry
)


def init_sentry(config: Config) -> bool:
    """Initialize Sentry for error tracking. Returns True when enabled."""
    if config.environment != "production" or not config.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        environment=config.environment,
        release=os.getenv("APP_VERSION", "unknown"),
    )
    return True


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track request metrics"""
    REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
    REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)


def track_account_link(platform: str, outcome: str):
    """Track OAuth link outcome (linked, reconnected, denied, failed)"""
    ACCOUNT_LINKS.labels(platform=platform, outcome=outcome).inc()


def track_publish_attempt(platform: str, status: str):
    """Track a settled publish attempt"""
    PUBLISH_ATTEMPTS.labels(platform=platform, status=status).inc()


def track_post_submission(status: str):
    """Track a persisted post submission"""
    POST_SUBMISSIONS.labels(status=status).inc()
