"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Ticket metrics
ticket_purchases = Counter(
    'ticket_purchases_total',
    'Total ticket purchase attempts',
    ['status']  # success, conflict, not_found, forbidden
)

ticket_purchase_latency = Histogram(
    'ticket_purchase_latency_seconds',
    'Ticket purchase latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Auth metrics
auth_attempts = Counter(
    'auth_attempts_total',
    'Registration and login attempts',
    ['action', 'result']  # register/login, success/conflict/invalid
)

# Catalog metrics
catalog_mutations = Counter(
    'catalog_mutations_total',
    'Event create/update/delete operations',
    ['operation']
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_ticket_purchase(status: str):
    """Record purchase attempt. Status: success, conflict, not_found, forbidden"""
    ticket_purchases.labels(status=status).inc()


def record_auth_attempt(action: str, result: str):
    auth_attempts.labels(action=action, result=result).inc()


def record_catalog_mutation(operation: str):
    catalog_mutations.labels(operation=operation).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
