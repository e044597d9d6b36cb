"""
Prometheus metrics for the product catalog.
"""
from prometheus_client import Counter, Histogram, Gauge
from loguru import logger

# Counters
product_writes = Counter(
    'catalog_product_writes_total',
    'Total number of product write operations',
    ['operation']  # create, update, delete
)

total_searches = Counter(
    'catalog_searches_total',
    'Total number of full-text search requests'
)

request_errors = Counter(
    'catalog_errors_total',
    'Total number of failed requests',
    ['error_type']
)

# Histograms
store_duration = Histogram(
    'catalog_store_operation_duration_seconds',
    'Duration of a repository call against PostgreSQL',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

# Gauges
active_products = Gauge(
    'catalog_active_products',
    'Number of products in the database'
)

api_health = Gauge(
    'catalog_api_health',
    'API health status (1=healthy, 0=unhealthy)'
)


def record_product_write(operation: str) -> None:
    """
    Count a successful create, update or delete.

    Args:
        operation: One of create, update, delete
    """
    product_writes.labels(operation=operation).inc()
    logger.debug(f"Product write recorded: {operation}")


def record_search(results_count: int) -> None:
    total_searches.inc()
    logger.debug(f"Search recorded: {results_count} results")


def record_request_error(error_type: str) -> None:
    """
    Count a failed request.

    Args:
        error_type: Exception class name
    """
    request_errors.labels(error_type=error_type).inc()
    logger.debug(f"Request error recorded: {error_type}")


def observe_store_duration(operation: str, duration: float) -> None:
    store_duration.labels(operation=operation).observe(duration)


def update_active_products(count: int) -> None:
    active_products.set(count)
    logger.debug(f"Active products updated: {count}")


def set_api_health(healthy: bool) -> None:
    """
    Set API health status.

    Args:
        healthy: True if the API can serve requests
    """
    api_health.set(1 if healthy else 0)
    logger.debug(f"API health set to: {'healthy' if healthy else 'unhealthy'}")


def get_metrics_summary() -> dict:
    """
    Summary of the current gauge values.

    Returns:
        Dictionary with the main metrics
    """
    return {
        "api_health": api_health._value.get(),
        "active_products": active_products._value.get(),
    }
