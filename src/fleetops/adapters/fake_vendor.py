"""Fake integrated vendor — deterministic vendor API for testing and development.

Can be scripted to fail (timeout or unavailable) a number of times before
succeeding, to exercise the bounded retry policy.
"""

from uuid import uuid4

from fleetops.adapters.vendor_port import VendorPort, VendorUnavailable


class FakeVendor(VendorPort):
    """Fake vendor that accepts every order by default."""

    def __init__(self):
        self.calls: list[dict] = []
        self.failures_before_success = 0
        self.failure = "timeout"

    def configure(self, failures_before_success: int = 0, failure: str = "timeout"):
        """Fail the next ``failures_before_success`` calls with ``failure`` ("timeout" or "unavailable")."""
        self.failures_before_success = failures_before_success
        self.failure = failure

    def create_order(self, vendor: str, order_ref: str, payload: dict, timeout: float) -> dict:
        self.calls.append({"vendor": vendor, "order_ref": order_ref, "timeout": timeout})

        if self.failures_before_success > 0:
            self.failures_before_success -= 1
            if self.failure == "timeout":
                raise TimeoutError(f"{vendor} did not respond within {timeout}s")
            raise VendorUnavailable(f"{vendor} is unavailable")

        vendor_order_id = f"{vendor}-{uuid4().hex[:10]}"
        return {
            "vendor_order_id": vendor_order_id,
            "status": "accepted",
            "tracking_url": f"https://fake-vendor.example.com/track/{vendor_order_id}",
        }

    def reset(self):
        self.calls.clear()
        self.failures_before_success = 0
        self.failure = "timeout"
