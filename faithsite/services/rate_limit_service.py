"""
Rate limiting for public, unauthenticated endpoints.

Counters live behind a small ``CounterStore`` interface:

- ``MemoryCounterStore``: process-local dict guarded by a lock (default)
- ``RedisCounterStore``: INCR + PEXPIRE, shared across workers

The memory store is non-durable and per-process; each worker counts on its
own. It is soft abuse mitigation for contact/consultation forms, not a
security boundary.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple

import redis
from redis.exceptions import RedisError
from flask import Flask, current_app

from faithsite.logging_config import describe_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPolicy:
    max_requests: int
    window_seconds: int


# Generic API traffic
DEFAULT_POLICY = RateLimitPolicy(max_requests=100, window_seconds=60)
# Public marketing / contact forms
PUBLIC_FORM_POLICY = RateLimitPolicy(max_requests=5, window_seconds=3600)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    reset_at: int  # Unix seconds


class CounterStore(Protocol):
    def increment(self, key: str, window_seconds: int, now: float) -> Tuple[int, float]:
        """Count one hit for ``key``; return (count in current window, window reset time)."""
        ...

    def sweep(self, now: float) -> int:
        """Evict expired windows; return how many were dropped."""
        ...

    def reset(self, key: Optional[str] = None) -> None:
        """Forget ``key`` (or everything when None)."""
        ...


class MemoryCounterStore:
    """In-process counters. Window resets lazily on the first hit after expiry."""

    def __init__(self):
        self._entries: Dict[str, list] = {}  # key -> [count, reset_at]
        self._lock = threading.Lock()

    def increment(self, key: str, window_seconds: int, now: float) -> Tuple[int, float]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[1] <= now:
                entry = [1, now + window_seconds]
                self._entries[key] = entry
            else:
                entry[0] += 1
            return entry[0], entry[1]

    def sweep(self, now: float) -> int:
        with self._lock:
            expired = [key for key, (_, reset_at) in self._entries.items() if reset_at <= now]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self):
        return len(self._entries)


class RedisCounterStore:
    """Fixed window per key using INCR with a PEXPIRE set on the first hit."""

    def __init__(self, client: redis.Redis, prefix: str = 'faithsite:rl:'):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def increment(self, key: str, window_seconds: int, now: float) -> Tuple[int, float]:
        redis_key = self._key(key)
        pipe = self.client.pipeline(transaction=True)
        pipe.incr(redis_key, 1)
        pipe.pttl(redis_key)
        count, ttl_ms = pipe.execute()
        count = int(count)
        ttl_ms = int(ttl_ms)
        if count == 1 or ttl_ms < 0:
            # First hit (or a key that lost its TTL): start the window now
            ttl_ms = int(window_seconds * 1000)
            self.client.pexpire(redis_key, ttl_ms)
        return count, now + ttl_ms / 1000.0

    def sweep(self, now: float) -> int:
        # Redis expires keys itself
        return 0

    def reset(self, key: Optional[str] = None) -> None:
        if key is not None:
            self.client.delete(self._key(key))
            return
        keys = list(self.client.scan_iter(match=f"{self.prefix}*"))
        if keys:
            self.client.delete(*keys)


class RateLimiter:
    """Counts hits per identifier (+ optional route) against a policy."""

    def __init__(self, store: Optional[CounterStore] = None,
                 max_requests: int = DEFAULT_POLICY.max_requests,
                 window_seconds: int = DEFAULT_POLICY.window_seconds,
                 sweep_interval: int = 300,
                 clock: Callable[[], float] = time.time):
        self.store = store if store is not None else MemoryCounterStore()
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._last_sweep = clock()
        self._sweep_lock = threading.Lock()

    @staticmethod
    def build_key(identifier, route: Optional[str] = None) -> str:
        identifier = identifier or 'unknown'
        return f"{identifier}:{route}" if route else str(identifier)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self.sweep_interval:
            return
        with self._sweep_lock:
            if now - self._last_sweep < self.sweep_interval:
                return
            self._last_sweep = now
        evicted = self.store.sweep(now)
        if evicted:
            logger.debug(f"[RATE_LIMIT] Swept {evicted} expired keys")

    def check(self, identifier, route: Optional[str] = None,
              max_requests: Optional[int] = None,
              window_seconds: Optional[int] = None) -> RateLimitResult:
        """Count one request and report whether it is within the limit."""
        limit = self.max_requests if max_requests is None else max_requests
        window = self.window_seconds if window_seconds is None else window_seconds
        key = self.build_key(identifier, route)
        now = self._clock()

        self._maybe_sweep(now)
        count, reset_at = self.store.increment(key, window, now)

        result = RateLimitResult(
            allowed=count <= limit,
            remaining=max(0, limit - count),
            limit=limit,
            reset_at=int(math.ceil(reset_at)),
        )
        if not result.allowed:
            logger.warning(f"[RATE_LIMIT] Limit exceeded for {key} ({count}/{limit})")
        return result

    def check_policy(self, identifier, route: Optional[str], policy: RateLimitPolicy) -> RateLimitResult:
        return self.check(identifier, route, policy.max_requests, policy.window_seconds)

    def reset(self, identifier=None, route: Optional[str] = None) -> None:
        """Forget one key, or all counters when no identifier is given."""
        self.store.reset(self.build_key(identifier, route) if identifier is not None else None)


def get_rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    return {
        'X-RateLimit-Limit': str(result.limit),
        'X-RateLimit-Remaining': str(result.remaining),
        'X-RateLimit-Reset': str(result.reset_at),
    }


def build_counter_store(app: Flask) -> CounterStore:
    """Pick the counter backend from RATE_LIMIT_BACKEND; Redis failures fall back to memory."""
    backend = (app.config.get('RATE_LIMIT_BACKEND') or 'memory').strip().lower()

    if backend == 'redis':
        redis_url = app.config.get('REDIS_URL', 'redis://redis:6379/0')
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
            )
            client.ping()
            logger.info(f"[RATE_LIMIT] Redis counters: {redis_url}")
            return RedisCounterStore(client, app.config.get('RATE_LIMIT_PREFIX', 'faithsite:rl:'))
        except (RedisError, ValueError) as e:
            logger.warning(f"[RATE_LIMIT] Redis unavailable ({describe_error(e)}); using in-memory counters")
    elif backend != 'memory':
        logger.warning(f"[RATE_LIMIT] Unknown backend '{backend}'; using in-memory counters")

    return MemoryCounterStore()


def init_rate_limiter(app: Flask) -> RateLimiter:
    """Create the app-wide limiter from config and register it on the app."""
    limiter = RateLimiter(
        store=build_counter_store(app),
        max_requests=app.config.get('RATE_LIMIT_MAX', DEFAULT_POLICY.max_requests),
        window_seconds=app.config.get('RATE_LIMIT_WINDOW_SECONDS', DEFAULT_POLICY.window_seconds),
        sweep_interval=app.config.get('RATE_LIMIT_SWEEP_SECONDS', 300),
    )
    app.extensions['rate_limiter'] = limiter
    return limiter


def get_rate_limiter() -> RateLimiter:
    """Limiter registered on the current app."""
    limiter = current_app.extensions.get('rate_limiter')
    if limiter is None:
        raise RuntimeError("Rate limiter not initialized.")
    return limiter
