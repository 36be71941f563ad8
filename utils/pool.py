import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout

from flask import current_app, has_app_context

from classes.errors import ComputeTimeout

logger = logging.getLogger(__name__)


def _settings(max_workers, timeout):
    if has_app_context():
        max_workers = max_workers or current_app.config.get("ANALYTICS_MAX_WORKERS")
        timeout = timeout if timeout is not None else current_app.config.get("ANALYTICS_TIMEOUT")
    return max(int(max_workers or 1), 1), timeout


def bounded_map(func, items, max_workers=None, timeout=None):
    """Apply `func` to every item on a bounded thread pool.

    Results come back in input order. Each call must be independent of the
    others and must not use the database session. If the whole batch has not
    finished within `timeout` seconds, `ComputeTimeout` is raised.
    """
    items = list(items)
    if not items:
        return []

    max_workers, timeout = _settings(max_workers, timeout)
    if max_workers == 1 or len(items) == 1:
        return [func(item) for item in items]

    executor = ThreadPoolExecutor(max_workers=min(max_workers, len(items)))
    try:
        return list(executor.map(func, items, timeout=timeout))
    except FuturesTimeout:
        logger.error("Analytics fan-out over %d items exceeded %ss", len(items), timeout)
        raise ComputeTimeout("Analytics computation timed out")
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
