"""Tests for the Redis rate limiter and its middleware."""

import asyncio
import itertools

from fastapi import FastAPI
from fastapi.testclient import TestClient

from agriqual.middleware.rate_limit import RateLimitMiddleware
from agriqual.rate_limiter import RateLimiter


class FakePipeline:
    """Queues sorted-set commands and applies them on execute."""

    def __init__(self, redis):
        self.redis = redis
        self.commands = []

    def zadd(self, key, mapping):
        self.commands.append(("zadd", key, mapping))

    def zremrangebyscore(self, key, low, high):
        self.commands.append(("zrem", key, (low, high)))

    def zcard(self, key):
        self.commands.append(("zcard", key, None))

    def expire(self, key, seconds):
        self.commands.append(("expire", key, seconds))

    async def execute(self):
        if self.redis.down:
            raise ConnectionError("redis unavailable")
        results = []
        for command, key, arg in self.commands:
            members = self.redis.sets.setdefault(key, {})
            if command == "zadd":
                members.update(arg)
                results.append(len(arg))
            elif command == "zrem":
                low, high = arg
                stale = [member for member, score in members.items() if low <= score <= high]
                for member in stale:
                    del members[member]
                results.append(len(stale))
            elif command == "zcard":
                results.append(len(members))
            else:
                results.append(True)
        return results


class FakeRedis:
    def __init__(self, down=False):
        self.sets = {}
        self.down = down

    def pipeline(self):
        return FakePipeline(self)


def clock(monkeypatch, start=1000.0, step=0.001):
    ticks = itertools.count()
    monkeypatch.setattr("agriqual.rate_limiter.time.time", lambda: start + next(ticks) * step)


class TestRateLimiter:
    def test_allows_up_to_limit_then_blocks(self, monkeypatch):
        clock(monkeypatch)
        limiter = RateLimiter(redis_client=FakeRedis(), max_requests=3, window_seconds=60)

        async def run():
            return [await limiter.is_allowed("10.0.0.1") for _ in range(4)]

        results = asyncio.run(run())

        assert results[:3] == [(True, 0)] * 3
        assert results[3] == (False, 60)

    def test_clients_are_limited_separately(self, monkeypatch):
        clock(monkeypatch)
        redis = FakeRedis()
        limiter = RateLimiter(redis_client=redis, max_requests=1, window_seconds=60)

        async def run():
            return (
                await limiter.is_allowed("10.0.0.1"),
                await limiter.is_allowed("10.0.0.2"),
                await limiter.is_allowed("10.0.0.1"),
            )

        first, other, repeat = asyncio.run(run())

        assert first == (True, 0)
        assert other == (True, 0)
        assert repeat[0] is False
        assert set(redis.sets) == {"agriqual:rate_limit:10.0.0.1", "agriqual:rate_limit:10.0.0.2"}

    def test_window_expiry(self, monkeypatch):
        clock(monkeypatch, step=2.0)
        limiter = RateLimiter(redis_client=FakeRedis(), max_requests=1, window_seconds=1)

        async def run():
            return [await limiter.is_allowed("10.0.0.1") for _ in range(3)]

        assert asyncio.run(run()) == [(True, 0)] * 3

    def test_fails_open_when_redis_down(self):
        limiter = RateLimiter(redis_client=FakeRedis(down=True), max_requests=0)

        assert asyncio.run(limiter.is_allowed("10.0.0.1")) == (True, 0)


class StubLimiter:
    max_requests = 5
    window_size = 60.0

    def __init__(self, allowed):
        self.allowed = allowed
        self.clients = []

    async def is_allowed(self, client_id):
        self.clients.append(client_id)
        return (True, 0) if self.allowed else (False, 60)


def make_app(limiter, enabled=True):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rate_limiter=limiter, enabled=enabled)

    @app.get("/api/weather")
    async def weather():
        return {"ok": True}

    @app.get("/api/weather/health")
    async def health():
        return {"status": "healthy"}

    return app


class TestRateLimitMiddleware:
    def test_allowed_request_gets_headers(self):
        limiter = StubLimiter(allowed=True)

        response = TestClient(make_app(limiter)).get("/api/weather")

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Window"] == "60"
        assert limiter.clients == ["testclient"]

    def test_blocked_request(self):
        response = TestClient(make_app(StubLimiter(allowed=False))).get("/api/weather")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.json() == {
            "message": "Rate limit exceeded. Please try again later.",
            "retry_after": 60,
        }

    def test_health_bypasses_limit(self):
        limiter = StubLimiter(allowed=False)

        response = TestClient(make_app(limiter)).get("/api/weather/health")

        assert response.status_code == 200
        assert limiter.clients == []

    def test_disabled(self):
        limiter = StubLimiter(allowed=False)

        response = TestClient(make_app(limiter, enabled=False)).get("/api/weather")

        assert response.status_code == 200
        assert limiter.clients == []
