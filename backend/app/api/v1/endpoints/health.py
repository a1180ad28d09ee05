"""
Health Check Endpoints

- /health/live  - the process is up
- /health/ready - the catalog database answers and its tables exist;
                  the rate-limit Redis answers when one is configured
"""

from fastapi import APIRouter, HTTPException, status
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict
import asyncio
import time

from sqlalchemy import func, select, text

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.logging_config import logger
from app.models.problem import ProblemStatement


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def _timed(name: str, probe: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
    """Run a probe, attach its latency and turn failures into an unhealthy result"""
    start = time.perf_counter()
    try:
        result = await probe()
        result.setdefault("status", "healthy")
    except Exception as e:
        logger.warning(f"[HealthCheck] {name} check failed: {e}")
        result = {"status": "unhealthy", "error": str(e)}
    result["latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
    return result


async def _probe_database() -> Dict[str, Any]:
    async with AsyncSessionLocal() as session:
        await session.execute(text("SELECT 1"))
        problems = await session.scalar(select(func.count()).select_from(ProblemStatement))
    return {"tables_ready": True, "problem_count": problems}


async def _probe_redis() -> Dict[str, Any]:
    import redis.asyncio as redis

    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    finally:
        await client.aclose()
    return {}


async def check_database() -> Dict[str, Any]:
    return await _timed("Database", _probe_database)


async def check_redis() -> Dict[str, Any]:
    if not settings.REDIS_URL:
        return {"status": "skipped", "message": "REDIS_URL not set, rate limits kept in memory"}
    return await _timed("Redis", _probe_redis)


@router.get("/live")
async def liveness_check():
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "app": settings.APP_NAME,
        "version": settings.API_VERSION,
    }


@router.get("/ready")
async def readiness_check():
    """503 until the database is usable and any configured Redis answers"""
    db_check, redis_check = await asyncio.gather(check_database(), check_redis())

    is_ready = db_check["status"] == "healthy" and redis_check["status"] != "unhealthy"
    report = {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {"database": db_check, "redis": redis_check},
    }

    if not is_ready:
        logger.warning("[HealthCheck] Service not ready", extra={"checks": report["checks"]})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=report)

    return report
