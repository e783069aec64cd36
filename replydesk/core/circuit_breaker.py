"""Circuit breakers guarding the store and webhook boundaries."""

import enum
import logging
import threading
import time

logger = logging.getLogger(__name__)


class CircuitState(enum.Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerOpen(Exception):
    """Raised when a call is attempted on an open circuit."""

    def __init__(self, service_name: str) -> None:
        self.service_name = service_name
        super().__init__(f"Circuit breaker is open for {service_name}")


_registry: dict[str, "CircuitBreaker"] = {}
_registry_lock = threading.Lock()


class CircuitBreaker:
    """Consecutive-failure circuit breaker for one external dependency.

    Opens after ``failure_threshold`` consecutive failures. Once
    ``recovery_timeout`` seconds have passed, one trial call is let through
    (half-open); success closes the circuit, failure re-opens it.

    Args:
        service_name: Identifier for the protected service (used in logs).
        failure_threshold: Number of consecutive failures before opening.
        recovery_timeout: Seconds to wait before half-opening.
    """

    def __init__(
        self,
        service_name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
    ) -> None:
        self.service_name = service_name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout

        self._failure_count = 0
        self._opened_at = 0.0
        self._state = CircuitState.CLOSED
        self._lock = threading.Lock()

        with _registry_lock:
            _registry[service_name] = self

    @property
    def state(self) -> CircuitState:
        """Current state; an expired OPEN circuit reports HALF_OPEN."""
        with self._lock:
            if (
                self._state == CircuitState.OPEN
                and time.monotonic() - self._opened_at >= self.recovery_timeout
            ):
                self._state = CircuitState.HALF_OPEN
                logger.warning("Circuit breaker HALF_OPEN for %s", self.service_name)
            return self._state

    @property
    def failure_count(self) -> int:
        """Consecutive failures recorded since the last success."""
        return self._failure_count

    def check(self) -> None:
        """Raise ``CircuitBreakerOpen`` if calls are currently refused."""
        if self.state == CircuitState.OPEN:
            raise CircuitBreakerOpen(self.service_name)

    def record_success(self) -> None:
        """Reset the failure count and close the circuit."""
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info("Circuit breaker CLOSED for %s", self.service_name)
            self._failure_count = 0
            self._state = CircuitState.CLOSED

    def record_failure(self) -> None:
        """Count a failure; open the circuit at the threshold or on a failed trial."""
        with self._lock:
            self._failure_count += 1
            should_open = (
                self._state == CircuitState.HALF_OPEN
                or self._failure_count >= self.failure_threshold
            )
            if should_open:
                if self._state != CircuitState.OPEN:
                    logger.warning(
                        "Circuit breaker OPEN for %s after %d consecutive failures",
                        self.service_name,
                        self._failure_count,
                    )
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()

    def reset(self) -> None:
        """Force the breaker back to CLOSED (tests, admin tooling)."""
        with self._lock:
            self._failure_count = 0
            self._opened_at = 0.0
            self._state = CircuitState.CLOSED


def get_all_circuit_breakers() -> dict[str, CircuitBreaker]:
    """Return a snapshot of every registered breaker, keyed by service name."""
    with _registry_lock:
        return dict(_registry)


supabase_circuit_breaker = CircuitBreaker("supabase")
delivery_circuit_breaker = CircuitBreaker("delivery_webhook", failure_threshold=5, recovery_timeout=30.0)
draft_circuit_breaker = CircuitBreaker("draft_webhook", failure_threshold=3, recovery_timeout=30.0)
