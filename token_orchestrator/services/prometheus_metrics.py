"""
Prometheus metrics for Token Orchestrator
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .. import config

# Build info
BUILD_INFO = Gauge(
    'token_orchestrator_build_info',
    'Build information',
    ['version']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'token_orchestrator_requests_total',
    'Total number of requests',
    ['status_class', 'path_group']
)

# Key lifecycle
KEYS_ISSUED_TOTAL = Counter(
    'token_orchestrator_keys_issued_total',
    'Total number of keys issued'
)

KEYS_DELETED_TOTAL = Counter(
    'token_orchestrator_keys_deleted_total',
    'Total number of keys deleted by request'
)

KEYS_REAPED_TOTAL = Counter(
    'token_orchestrator_keys_reaped_total',
    'Total number of keys evicted by the reaper after their lease lapsed'
)

KEEPALIVES_TOTAL = Counter(
    'token_orchestrator_keepalives_total',
    'Total number of accepted keep-alive signals'
)

KEY_BLOCK_CHANGES_TOTAL = Counter(
    'token_orchestrator_key_block_changes_total',
    'Total number of block/unblock operations',
    ['action']
)

KEY_REJECTIONS_TOTAL = Counter(
    'token_orchestrator_key_rejections_total',
    'Total number of key operations rejected',
    ['operation', 'reason']
)

KEYS_ACTIVE = Gauge(
    'token_orchestrator_keys_active',
    'Number of keys currently held in the store'
)

# Reaper sweep latency
REAPER_SWEEP_SECONDS = Histogram(
    'token_orchestrator_reaper_sweep_seconds',
    'Duration of a single reaper sweep in seconds',
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0]
)


class PrometheusMetrics:
    """Service for managing Prometheus metrics."""

    def __init__(self):
        self._setup_build_info()

    def _setup_build_info(self):
        """Set up build information gauge."""
        BUILD_INFO.labels(version=config.APP_VERSION).set(1)

    def increment_requests(self, status_code: int, path: str = "/unknown"):
        """Increment request counter."""
        if 200 <= status_code < 300:
            status_class = "2xx"
        elif 400 <= status_code < 500:
            status_class = "4xx"
        elif 500 <= status_code < 600:
            status_class = "5xx"
        else:
            status_class = "other"

        if path.endswith("/alive"):
            path_group = "keepalive"
        elif path.endswith("/info"):
            path_group = "info"
        elif path.startswith("/keys"):
            path_group = "keys"
        else:
            path_group = "other"

        REQUESTS_TOTAL.labels(status_class=status_class, path_group=path_group).inc()

    def increment_keys_issued(self, count: int = 1):
        KEYS_ISSUED_TOTAL.inc(count)

    def increment_keys_deleted(self, count: int = 1):
        KEYS_DELETED_TOTAL.inc(count)

    def increment_keys_reaped(self, count: int = 1):
        """Increment reaped keys counter."""
        KEYS_REAPED_TOTAL.inc(count)

    def increment_keepalives(self, count: int = 1):
        KEEPALIVES_TOTAL.inc(count)

    def increment_block_change(self, blocked: bool):
        KEY_BLOCK_CHANGES_TOTAL.labels(action="block" if blocked else "unblock").inc()

    def increment_rejection(self, operation: str, reason: str):
        """Increment rejected operation counter."""
        KEY_REJECTIONS_TOTAL.labels(operation=operation, reason=reason).inc()

    def set_keys_active(self, count: int):
        KEYS_ACTIVE.set(count)

    def observe_reaper_sweep(self, seconds: float):
        REAPER_SWEEP_SECONDS.observe(seconds)

    def get_metrics(self) -> bytes:
        """Get Prometheus metrics in text format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get the content type for Prometheus metrics."""
        return CONTENT_TYPE_LATEST


# Global metrics instance
prometheus_metrics = PrometheusMetrics()
