"""
Redis-based rate limiting for API endpoints.
Fixed window counter per view and client IP.
"""
import logging
from functools import wraps
from typing import Optional, Tuple

import redis
from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Lazily connected Redis counter.

    Connection failures disable limiting instead of failing requests.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url
        self._client = None
        self._unavailable = False

    @property
    def client(self) -> Optional[redis.Redis]:
        if self._client is None and not self._unavailable:
            try:
                client = redis.Redis.from_url(
                    self.url or settings.REDIS_URL,
                    decode_responses=True,
                    socket_connect_timeout=2
                )
                client.ping()
                self._client = client
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning(f"Redis connection failed: {e}. Rate limiting will be disabled.")
                self._unavailable = True
        return self._client

    def hit(self, key: str, window_seconds: int) -> Optional[Tuple[int, int]]:
        """Count one request; returns (count, ttl) or None when disabled."""
        if not getattr(settings, 'RATE_LIMIT_ENABLED', True):
            return None
        client = self.client
        if client is None:
            return None

        count = client.incr(key)
        if count == 1:
            client.expire(key, window_seconds)
        return count, client.ttl(key)


limiter = RateLimiter()


def get_client_ip(request) -> str:
    """Extract client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


def rate_limit(max_requests: int = 20, window_seconds: int = 60):
    """
    Rate limiting decorator for DRF view methods.

    Usage:
        @rate_limit(20, 60)  # 20 requests per minute
        def get(self, request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            key = f"rate_limit:{self.__class__.__name__}.{view_func.__name__}:{get_client_ip(request)}"
            try:
                result = limiter.hit(key, window_seconds)
            except redis.RedisError as e:
                logger.error(f"Redis error in rate limiting: {e}")
                result = None

            if result is None:
                return view_func(self, request, *args, **kwargs)

            count, ttl = result
            if count > max_requests:
                return Response(
                    {
                        'error': 'Rate limit exceeded',
                        'detail': f'Maximum {max_requests} requests per {window_seconds} seconds allowed.',
                        'retry_after': ttl
                    },
                    status=status.HTTP_429_TOO_MANY_REQUESTS,
                    headers={
                        'X-RateLimit-Limit': str(max_requests),
                        'X-RateLimit-Remaining': '0',
                        'X-RateLimit-Reset': str(ttl),
                        'Retry-After': str(ttl)
                    }
                )

            response = view_func(self, request, *args, **kwargs)
            response['X-RateLimit-Limit'] = str(max_requests)
            response['X-RateLimit-Remaining'] = str(max(0, max_requests - count))
            response['X-RateLimit-Reset'] = str(ttl)
            return response

        return wrapper
    return decorator
