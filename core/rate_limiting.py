"""
In-memory rate limiting for the authentication and AI endpoints.
"""
import threading
import time
from typing import Dict, Any, Optional

from fastapi import Request

from core.config import settings
from core.exceptions import RateLimitException
from core.logging import get_logger

logger = get_logger("security")


class RateLimiter:
    """Fixed-window rate limiter keyed by policy and client."""

    def __init__(self, policies: Optional[Dict[str, Dict[str, int]]] = None):
        # {key: {"count": int, "window_start": float, "blocked_until": float}}
        self.storage: Dict[str, Dict[str, float]] = {}
        self._lock = threading.Lock()
        self.cleanup_interval = settings.rate_limit_cleanup_interval_seconds
        self._last_cleanup = time.time()
        self.policies = policies or {
            "default": {"requests": 100, "window": 60},
            "auth": {
                "requests": settings.auth_rate_limit_requests,
                "window": settings.auth_rate_limit_window_seconds,
            },
            "ai_generation": {
                "requests": settings.ai_rate_limit_requests,
                "window": settings.ai_rate_limit_window_seconds,
            },
        }

    @staticmethod
    def _get_client_key(request: Request) -> str:
        """Client address, honouring X-Forwarded-For behind a proxy."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            client_ip = forwarded_for.split(",")[0].strip()
        else:
            client_ip = request.client.host if request.client else "unknown"
        return f"ip_{client_ip}"

    def is_allowed(self, client_key: str, policy_name: str = "default") -> tuple[bool, Dict[str, Any]]:
        """Count one request against `policy_name` for `client_key`."""
        policy = self.policies.get(policy_name, self.policies["default"])
        rate_key = f"{policy_name}_{client_key}"
        current_time = time.time()

        if current_time - self._last_cleanup >= self.cleanup_interval:
            self._last_cleanup = current_time
            self.cleanup_expired(max_age_seconds=self._longest_window())

        with self._lock:
            client_data = self.storage.setdefault(
                rate_key, {"count": 0, "window_start": current_time, "blocked_until": 0}
            )

            if client_data["blocked_until"] > current_time:
                return False, {
                    "error": "Rate limit exceeded",
                    "retry_after": max(1, int(client_data["blocked_until"] - current_time)),
                }

            if current_time - client_data["window_start"] >= policy["window"]:
                client_data["count"] = 0
                client_data["window_start"] = current_time
                client_data["blocked_until"] = 0

            if client_data["count"] >= policy["requests"]:
                window_end = client_data["window_start"] + policy["window"]
                client_data["blocked_until"] = window_end
                return False, {
                    "error": "Rate limit exceeded",
                    "requests_per_window": policy["requests"],
                    "window_seconds": policy["window"],
                    "retry_after": max(1, int(window_end - current_time)),
                }

            client_data["count"] += 1
            return True, {
                "requests_remaining": policy["requests"] - client_data["count"],
                "window_reset": client_data["window_start"] + policy["window"],
            }

    def _longest_window(self) -> int:
        return max(policy["window"] for policy in self.policies.values())

    def cleanup_expired(self, max_age_seconds: int = 3600) -> int:
        """Drop stale entries; returns how many were removed."""
        current_time = time.time()
        with self._lock:
            expired_keys = [
                key for key, data in self.storage.items()
                if current_time - data["window_start"] > max_age_seconds
                and data["blocked_until"] <= current_time
            ]
            for key in expired_keys:
                del self.storage[key]
        return len(expired_keys)


# Global rate limiter instance
rate_limiter = RateLimiter()


def check_rate_limit(policy: str = "default"):
    """Build a FastAPI dependency enforcing `policy` for the calling client."""

    def dependency(request: Request):
        if not settings.enable_rate_limiting:
            return None

        allowed, info = rate_limiter.is_allowed(RateLimiter._get_client_key(request), policy)
        if not allowed:
            logger.warning("Rate limit exceeded", policy=policy, path=request.url.path)
            raise RateLimitException(retry_after=info.get("retry_after", 60))
        return info

    return dependency
