"""Health check module for service dependencies."""

import asyncio
import time
from dataclasses import dataclass
from typing import Literal

import httpx
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine


@dataclass
class ServiceHealth:
    """Health status for a service dependency."""

    status: Literal["connected", "unreachable", "error"]
    latency_ms: float | None = None
    error: str | None = None


async def check_database(engine: AsyncEngine) -> ServiceHealth:
    """Check database connectivity with SELECT 1 query.

    Args:
        engine: Application database engine

    Returns:
        ServiceHealth with connection status and latency
    """
    start = time.perf_counter()
    try:
        async with asyncio.timeout(2.0):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            latency = (time.perf_counter() - start) * 1000
            return ServiceHealth(status="connected", latency_ms=round(latency, 2))
    except asyncio.TimeoutError:
        return ServiceHealth(status="unreachable", error="timeout")
    except Exception as e:
        return ServiceHealth(status="error", error=str(e))


async def check_http(url: str, transport: httpx.AsyncBaseTransport | None = None) -> ServiceHealth:
    """Check that an HTTP dependency answers without a server error.

    Args:
        url: Health or root endpoint of the dependency
        transport: Optional httpx transport (used in tests)

    Returns:
        ServiceHealth with connection status and latency
    """
    start = time.perf_counter()
    try:
        async with asyncio.timeout(2.0):
            async with httpx.AsyncClient(transport=transport) as client:
                response = await client.get(url)
                if response.status_code < 500:
                    latency = (time.perf_counter() - start) * 1000
                    return ServiceHealth(
                        status="connected", latency_ms=round(latency, 2)
                    )
                return ServiceHealth(
                    status="error", error=f"HTTP {response.status_code}"
                )
    except asyncio.TimeoutError:
        return ServiceHealth(status="unreachable", error="timeout")
    except Exception as e:
        return ServiceHealth(status="error", error=str(e))


async def check_storage(base_url: str) -> ServiceHealth:
    return await check_http(f"{base_url.rstrip('/')}/storage/v1/version")


async def check_auth(base_url: str) -> ServiceHealth:
    return await check_http(f"{base_url.rstrip('/')}/auth/v1/health")
