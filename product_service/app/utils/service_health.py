"""
Product Service Health Check Utilities
======================================

Aggregates component checks into one health report. The service counts as
healthy when every required component is; optional components (the event
bus runs in degraded mode without Kafka) only mark the report ``degraded``.
"""

import time
from typing import Any, Awaitable, Callable, Dict, Set

HealthCheck = Callable[[], Awaitable[bool]]


class ProductServiceHealthChecker:
    """Product Service specific health checker"""

    def __init__(self, service_name: str = "product-service", version: str = "1.0.0"):
        self.service_name = service_name
        self.version = version
        self.checks: Dict[str, HealthCheck] = {}
        self.optional: Set[str] = set()

    def add_check(self, name: str, check_func: HealthCheck, required: bool = True) -> None:
        """Add a health check coroutine function"""
        self.checks[name] = check_func
        if not required:
            self.optional.add(name)

    async def run_checks(self) -> Dict[str, Any]:
        results: Dict[str, Dict[str, Any]] = {}
        check_start_time = time.time()

        for name, check_func in self.checks.items():
            individual_start = time.time()
            try:
                healthy = await check_func()
                results[name] = {"status": "healthy" if healthy else "unhealthy"}
            except Exception as e:
                results[name] = {"status": "error", "error": str(e)}
            results[name]["duration_ms"] = round(
                (time.time() - individual_start) * 1000, 2
            )

        failing = {n for n, r in results.items() if r["status"] != "healthy"}
        if failing - self.optional:
            status = "unhealthy"
        elif failing:
            status = "degraded"
        else:
            status = "healthy"

        return {
            "service": self.service_name,
            "version": self.version,
            "status": status,
            "checks": results,
            "total_duration_ms": round((time.time() - check_start_time) * 1000, 2),
            "timestamp": time.time(),
        }
