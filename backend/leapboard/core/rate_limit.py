from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response

from leapboard.core import redis_client
from leapboard.core.config import settings
from leapboard.core.security import Principal, require_admin

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportQuota:
    key: str
    limit: int
    used: int
    window_seconds: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)


def report_cost(request: Request) -> int:
    """Schools a report request covers; a comparison of N schools costs N."""
    ids = request.query_params.get("ids")
    if ids is None:
        return 1
    return max(1, len({i.strip() for i in ids.split(",") if i.strip()}))


def quota_key(principal: Principal) -> str:
    return f"quota:reports:{principal.subject}"


def report_quota():
    """Per-admin budget of school reports within a fixed window.

    Every report recomputes from the full registries, so the budget follows
    the admin account rather than the client address.
    """

    def _dep(
        request: Request,
        response: Response,
        admin: Principal = Depends(require_admin),
    ) -> ReportQuota | None:
        limit = int(settings.reports_rate_limit)
        window_seconds = int(settings.reports_rate_window_seconds)
        key = quota_key(admin)
        cost = report_cost(request)

        try:
            r = redis_client.get_redis()
            used = int(r.incrby(key, cost))
            if used == cost:
                r.expire(key, window_seconds)
        except Exception:
            log.warning("report_quota: counter unavailable subject=%s", admin.subject)
            return None

        quota = ReportQuota(key=key, limit=limit, used=used, window_seconds=window_seconds)
        if used > limit:
            ttl = r.ttl(key)
            retry_after = int(ttl) if ttl and ttl > 0 else window_seconds
            log.info("report_quota: exhausted subject=%s used=%s limit=%s", admin.subject, used, limit)
            raise HTTPException(
                status_code=429,
                detail="report quota exceeded",
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(quota.remaining)
        return quota

    return Depends(_dep)
