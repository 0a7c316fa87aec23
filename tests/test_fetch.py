import threading
import pytest
from sqlalchemy.exc import OperationalError
from app.core.exceptions import FetchFailedError
from app.services.fetch import fetch_all, fetch_one


def test_results_are_keyed_by_task_name():
    results = fetch_all({"a": lambda: 1, "b": lambda: [2, 3], "c": lambda: None})
    assert results == {"a": 1, "b": [2, 3], "c": None}


def test_empty_task_set():
    assert fetch_all({}) == {}


def test_tasks_run_concurrently():
    """Both tasks must be in flight at once for the barrier to release."""
    barrier = threading.Barrier(2, timeout=5)

    def task():
        barrier.wait()
        return threading.current_thread().name

    results = fetch_all({"left": task, "right": task}, max_workers=2)
    assert results["left"] != results["right"]


def test_failure_aborts_whole_batch():
    def broken():
        raise OperationalError("SELECT 1", {}, Exception("connection reset"))

    with pytest.raises(FetchFailedError) as exc_info:
        fetch_all({"ok": lambda: 1, "broken": broken})

    assert exc_info.value.error_code == "FETCH_FAILED"
    assert exc_info.value.details == {"query": "broken"}
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_fetch_one_wraps_errors():
    assert fetch_one("count", lambda: 7) == 7
    with pytest.raises(FetchFailedError):
        fetch_one("count", lambda: 1 / 0)
