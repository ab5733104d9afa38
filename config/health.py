"""Liveness probe for the API, the Celery broker and the socket layer."""

from __future__ import annotations

import time
from typing import Any

import redis
from django.conf import settings
from django.db import connection
from django.http import JsonResponse


def _timed(check) -> dict[str, Any]:
    started = time.perf_counter()
    result = check()
    result["latency_ms"] = round((time.perf_counter() - started) * 1000, 1)
    return result


def check_db() -> dict[str, Any]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


def check_redis() -> dict[str, Any]:
    url = getattr(settings, "REDIS_URL", None)
    if not url:
        return {"ok": False, "error": "REDIS_URL not configured"}
    try:
        client = redis.Redis.from_url(
            url,
            socket_timeout=0.5,
            socket_connect_timeout=0.5,
        )
        client.ping()
    except Exception as exc:  # noqa: BLE001 - health must degrade, not crash
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


def health(request):
    components = {"db": _timed(check_db), "redis": _timed(check_redis)}

    oks = [c["ok"] for c in components.values()]
    if all(oks):
        status = "ok"
    elif any(oks):
        status = "degraded"
    else:
        status = "down"

    return JsonResponse(
        {
            "status": status,
            "service": "conference-survey",
            "components": components,
        },
        status=200 if status == "ok" else 503,
    )
