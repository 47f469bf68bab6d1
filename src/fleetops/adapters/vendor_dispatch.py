"""Bounded vendor dispatch — per-attempt timeout plus capped exponential backoff."""

import os
import time
from dataclasses import dataclass

import structlog

from fleetops.adapters.vendor_port import VendorPort, VendorUnavailable
from fleetops.order.errors import IntegratedVendorDispatchFailed

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How long to wait for the vendor, and how often to try again."""

    max_attempts: int = 3
    timeout_seconds: float = 10.0
    backoff_seconds: float = 0.5
    multiplier: float = 2.0
    max_backoff_seconds: float = 5.0

    @classmethod
    def from_env(cls) -> "RetryPolicy":
        return cls(
            max_attempts=max(int(os.environ.get("VENDOR_DISPATCH_ATTEMPTS", "3")), 1),
            timeout_seconds=float(os.environ.get("VENDOR_DISPATCH_TIMEOUT", "10")),
            backoff_seconds=float(os.environ.get("VENDOR_DISPATCH_BACKOFF", "0.5")),
        )

    def backoff_for(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return min(self.backoff_seconds * (self.multiplier ** (attempt - 1)), self.max_backoff_seconds)


def dispatch_to_vendor(
    vendor_api: VendorPort,
    vendor: str,
    order_ref: str,
    payload: dict,
    policy: RetryPolicy | None = None,
    sleep=time.sleep,
) -> dict:
    """Place an order with an integrated vendor, retrying transient failures.

    Raises:
        IntegratedVendorDispatchFailed: every attempt timed out or was refused.
    """
    policy = policy or RetryPolicy.from_env()
    last_error: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return vendor_api.create_order(vendor, order_ref, payload, timeout=policy.timeout_seconds)
        except (TimeoutError, VendorUnavailable) as exc:
            last_error = exc
            logger.warning(
                "Integrated vendor dispatch attempt failed",
                vendor=vendor,
                order_ref=order_ref,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                error=str(exc),
            )
            if attempt < policy.max_attempts:
                sleep(policy.backoff_for(attempt))

    raise IntegratedVendorDispatchFailed(
        f"Integrated vendor {vendor} failed after {policy.max_attempts} attempt(s): {last_error}"
    ) from last_error
