import pytest

from core.db_connector import ConnectionManager, connection_state
from core.exceptions import ConnectionUnavailableError
from models.connection import ConnectionRequest

UNREACHABLE = ConnectionRequest(db_type="sqlite", connection_url="sqlite:////nonexistent-dir/deeper/shop.db")


def test_acquire_reuses_open_connection(shop_request):
    with ConnectionManager(shop_request, backoff_seconds=0) as manager:
        first = manager.acquire()
        assert manager.acquire() is first
        assert connection_state(first) == "open"


def test_acquire_reopens_closed_connection(shop_request):
    with ConnectionManager(shop_request, backoff_seconds=0) as manager:
        first = manager.acquire()
        first.close()
        second = manager.acquire()
        assert second is not first
        assert connection_state(second) == "open"


def test_acquire_reopens_invalidated_connection(shop_request):
    with ConnectionManager(shop_request, backoff_seconds=0) as manager:
        first = manager.acquire()
        first.invalidate()
        assert connection_state(first) == "broken"
        assert connection_state(manager.acquire()) == "open"


def test_acquire_retries_with_linear_backoff():
    sleeps = []
    manager = ConnectionManager(UNREACHABLE, max_retries=5, backoff_seconds=10, sleep=sleeps.append)
    with pytest.raises(ConnectionUnavailableError) as exc_info:
        manager.acquire()
    assert sleeps == [10, 20, 30, 40, 50]
    assert exc_info.value.attempts == 6
    assert exc_info.value.state == "absent"


def test_acquire_without_retries_fails_fast():
    sleeps = []
    manager = ConnectionManager(UNREACHABLE, max_retries=0, backoff_seconds=10, sleep=sleeps.append)
    with pytest.raises(ConnectionUnavailableError):
        manager.acquire()
    assert sleeps == []


def test_close_is_idempotent(shop_request):
    manager = ConnectionManager(shop_request, backoff_seconds=0)
    manager.acquire()
    manager.close()
    manager.close()
    assert connection_state(manager.acquire()) == "open"
    manager.close()
