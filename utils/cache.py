"""Response cache for analytics endpoints.

The aggregation code never sees the cache: views are wrapped with
`cache_analytics`, which stores the JSON body of successful GET responses
under a key built from the caller, the endpoint kind and the request
parameters. Two backends exist, an in-process TTL dict and Redis, picked
with the `CACHE_TYPE` setting.
"""
import fnmatch
import json
import logging
import threading
import time
from collections import OrderedDict
from functools import wraps

import redis
from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)


class MemoryBackend:
    """In-process TTL store holding at most `max_entries` keys, oldest evicted first."""

    def __init__(self, max_entries=1024):
        self._items = OrderedDict()
        self._lock = threading.Lock()
        self.max_entries = max_entries

    def get(self, key):
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= time.monotonic():
                del self._items[key]
                return None
            return value

    def set(self, key, value, ttl):
        with self._lock:
            now = time.monotonic()
            for stale in [k for k, (expires_at, _) in self._items.items() if expires_at <= now]:
                del self._items[stale]
            self._items.pop(key, None)
            self._items[key] = (now + ttl, value)
            while len(self._items) > self.max_entries:
                self._items.popitem(last=False)

    def delete_pattern(self, pattern):
        with self._lock:
            doomed = [k for k in self._items if fnmatch.fnmatchcase(k, pattern)]
            for key in doomed:
                del self._items[key]
        return len(doomed)

    def clear(self):
        with self._lock:
            self._items.clear()


class RedisBackend:
    def __init__(self, url):
        self.client = redis.Redis.from_url(url, decode_responses=True)

    def get(self, key):
        raw = self.client.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key, value, ttl):
        self.client.set(key, json.dumps(value), ex=int(ttl))

    def delete_pattern(self, pattern):
        keys = list(self.client.scan_iter(match=pattern))
        if keys:
            self.client.delete(*keys)
        return len(keys)

    def clear(self):
        self.delete_pattern("analytics:*")


class AnalyticsCache:
    def __init__(self, app=None):
        self.backend = None
        self.default_ttl = 300
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        cache_type = app.config.get("CACHE_TYPE", "memory")
        if cache_type == "redis":
            self.backend = RedisBackend(app.config["CACHE_REDIS_URL"])
        elif cache_type == "memory":
            self.backend = MemoryBackend(app.config.get("CACHE_MAX_ENTRIES", 1024))
        else:
            raise ValueError(f"Unknown CACHE_TYPE '{cache_type}'")
        self.default_ttl = app.config.get("CACHE_DEFAULT_TTL", 300)
        app.extensions["analytics_cache"] = self

    def get(self, key):
        try:
            return self.backend.get(key)
        except redis.RedisError as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

    def set(self, key, value, ttl=None):
        try:
            self.backend.set(key, value, ttl or self.default_ttl)
        except redis.RedisError as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    def invalidate(self, pattern):
        try:
            removed = self.backend.delete_pattern(pattern)
            logger.debug("Invalidated %d cache keys matching %s", removed, pattern)
            return removed
        except redis.RedisError as e:
            logger.warning("Cache invalidation failed for %s: %s", pattern, e)
            return 0

    def clear(self):
        self.backend.clear()


cache = AnalyticsCache()


def analytics_key(kind):
    user = g.get("user") or {}
    role = user.get("role") or "unknown"
    user_id = user.get("user_id") or "anonymous"
    params = ":".join(str(v) for _, v in sorted((request.view_args or {}).items()))
    query = "&".join(f"{k}={v}" for k, v in sorted(request.args.items()))
    return f"analytics:{role}:{kind}:{user_id}:{params}:{query}"


def cache_analytics(kind, ttl=None):
    """Serve a stored response for GET requests, store successful ones.

    Must sit below `login_required` so the key includes the caller.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if request.method != "GET":
                return f(*args, **kwargs)

            key = analytics_key(kind)
            cached = cache.get(key)
            if cached is not None:
                response = jsonify(cached)
                response.headers["X-Cache"] = "HIT"
                return response

            response = current_app.make_response(f(*args, **kwargs))
            if 200 <= response.status_code < 300 and response.is_json:
                cache.set(key, response.get_json(), ttl)
            response.headers["X-Cache"] = "MISS"
            return response
        return decorated_function
    return decorator
