"""
Fan-out/fan-in for the dashboard fetch stage.

Every read is submitted to a thread pool and the caller blocks until all of
them have finished. The first failure aborts the batch: tasks that have not
started are cancelled and a FetchFailedError is raised. No partial results
are ever returned.
"""
import logging
import concurrent.futures
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Mapping, Optional

from app.core.config import settings
from app.core.exceptions import AppException, FetchFailedError

logger = logging.getLogger(__name__)


def fetch_all(tasks: Mapping[str, Callable[[], Any]], max_workers: Optional[int] = None) -> Dict[str, Any]:
    """
    Run independent read tasks concurrently and return their results by name.

    Args:
        tasks: name -> zero-argument callable. Callables must not share a session.
        max_workers: pool width, defaults to settings.fetch_max_workers.

    Raises:
        FetchFailedError: if any task raises.
    """
    if not tasks:
        return {}

    workers = max(1, min(max_workers or settings.fetch_max_workers, len(tasks)))
    results: Dict[str, Any] = {}
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dashboard-fetch")
    try:
        future_to_name = {executor.submit(task): name for name, task in tasks.items()}
        for future in concurrent.futures.as_completed(future_to_name):
            name = future_to_name[future]
            try:
                results[name] = future.result()
            except Exception as e:
                for pending in future_to_name:
                    pending.cancel()
                logger.error(f"Fetch '{name}' failed: {e}", exc_info=True)
                if isinstance(e, FetchFailedError):
                    raise
                if isinstance(e, AppException):
                    raise FetchFailedError(details={"query": name, "code": e.error_code}) from e
                raise FetchFailedError(details={"query": name}) from e
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    return results


def fetch_one(name: str, task: Callable[[], Any]) -> Any:
    """Single blocking read with the same failure contract as fetch_all."""
    try:
        return task()
    except FetchFailedError:
        raise
    except Exception as e:
        logger.error(f"Fetch '{name}' failed: {e}", exc_info=True)
        raise FetchFailedError(details={"query": name}) from e
