import pytest

from boatbook import rate_limiter
from boatbook.rate_limiter import check_rate_limit


@pytest.fixture(autouse=True)
def fresh_counters(monkeypatch):
    monkeypatch.setattr(rate_limiter, "memory_cache", {})
    monkeypatch.setattr(rate_limiter, "get_redis_client", lambda: None)


class FakeRedis:
    def __init__(self, count=None, ttl=-2):
        self.count = count
        self.remaining = ttl
        self.writes = []

    def get(self, key):
        return self.count

    def ttl(self, key):
        return self.remaining

    def set(self, key, value, ex=None):
        self.writes.append((key, value, ex))


def test_window_allows_up_to_limit():
    results = [check_rate_limit("test:1.2.3.4", 3, 60)[0] for _ in range(4)]
    assert results == [True, True, True, False]


def test_keys_are_counted_separately():
    for _ in range(2):
        check_rate_limit("test:a", 2, 60)
    assert check_rate_limit("test:a", 2, 60)[0] is False
    assert check_rate_limit("test:b", 2, 60)[0] is True


def test_window_resets(monkeypatch):
    clock = [1_000_000]
    monkeypatch.setattr(rate_limiter.time, "time", lambda: clock[0])

    check_rate_limit("test:reset", 1, 60)
    assert check_rate_limit("test:reset", 1, 60)[0] is False

    clock[0] += 61
    allowed, count, ttl = check_rate_limit("test:reset", 1, 60)
    assert allowed is True
    assert count == 1
    assert ttl == 60


def test_resumes_count_from_redis():
    client = FakeRedis(count="5", ttl=30)
    allowed, count, ttl = check_rate_limit("test:shared", 5, 60, client)
    assert allowed is False
    assert count == 5
    assert ttl == 30


def test_syncs_count_to_redis_after_reset(monkeypatch):
    clock = [2_000_000]
    monkeypatch.setattr(rate_limiter.time, "time", lambda: clock[0])
    # Keep the expired entry so the reset path runs
    monkeypatch.setattr(rate_limiter, "cleanup_expired_cache", lambda: None)
    client = FakeRedis()

    check_rate_limit("test:sync", 5, 60, client)
    assert client.writes == []

    clock[0] += 61
    check_rate_limit("test:sync", 5, 60, client)
    assert client.writes == [("test:sync", 1, 60)]


def test_payment_endpoint_rate_limited(client, monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)

    statuses = [client.post("/api/bayarcash/create-payment", json={}).status_code for _ in range(11)]

    assert statuses[:10] == [400] * 10
    assert statuses[10] == 429


def test_rate_limit_response_has_retry_after(client, monkeypatch):
    monkeypatch.setattr(rate_limiter, "RATE_LIMIT_ENABLED", True)
    for _ in range(10):
        client.post("/api/bayarcash/create-payment", json={})

    response = client.post("/api/bayarcash/create-payment", json={})

    assert int(response.headers["retry-after"]) > 0
    assert response.json()["detail"]["message"].startswith("Rate limit exceeded")


def test_limiter_disabled_by_default(client):
    statuses = {client.post("/api/bayarcash/create-payment", json={}).status_code for _ in range(12)}
    assert statuses == {400}
