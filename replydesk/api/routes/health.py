"""Health check API routes.

Provides:
- GET /health : process status, scheduler state, and circuit breaker states
- GET /health/ping : lightweight 200 for external uptime monitors
"""

import time
from typing import Any

from fastapi import APIRouter

from replydesk import __version__
from replydesk.core.circuit_breaker import CircuitState, get_all_circuit_breakers
from replydesk.services import scheduler

router = APIRouter(prefix="/health", tags=["health"])

_start_time = time.monotonic()


@router.get("")
async def health_check() -> dict[str, Any]:
    """Overall health with circuit breaker states.

    Status is ``degraded`` while any breaker is open.
    """
    breakers = {name: cb.state.value for name, cb in get_all_circuit_breakers().items()}
    degraded = any(state == CircuitState.OPEN.value for state in breakers.values())
    return {
        "status": "degraded" if degraded else "healthy",
        "version": __version__,
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
        "scheduler_running": scheduler.is_running(),
        "circuit_breakers": breakers,
    }


@router.get("/ping")
async def ping() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}
