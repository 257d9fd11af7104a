"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry
import time
from functools import wraps
from typing import Callable

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

distance_cache_hits = Counter(
    'distance_cache_hits_total',
    'Total distance resolutions answered without an external lookup',
    ['source'],
    registry=registry
)

distance_cache_misses = Counter(
    'distance_cache_misses_total',
    'Total distance resolutions that required an external lookup',
    registry=registry
)

distance_lookups = Counter(
    'distance_lookups_total',
    'Total external distance lookups',
    ['outcome'],
    registry=registry
)

quotes_created = Counter(
    'quotes_created_total',
    'Total quotes computed',
    ['equipment_type'],
    registry=registry
)

ledger_operations = Counter(
    'ledger_operations_total',
    'Total quote ledger operations',
    ['operation', 'status'],
    registry=registry
)

ledger_operation_duration = Histogram(
    'ledger_operation_duration_seconds',
    'Quote ledger operation duration in seconds',
    ['operation'],
    registry=registry
)

ledger_size = Gauge(
    'ledger_size',
    'Number of quotes in the ledger',
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


def track_ledger_operation(operation: str):
    """Decorator to track quote ledger operation metrics"""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
                ledger_operations.labels(operation=operation, status='success').inc()
                return result
            except Exception:
                ledger_operations.labels(operation=operation, status='error').inc()
                raise
            finally:
                ledger_operation_duration.labels(operation=operation).observe(time.time() - start_time)
        return wrapper
    return decorator


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    from prometheus_client import generate_latest
    return generate_latest(registry).decode('utf-8')
