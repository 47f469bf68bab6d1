"""Integrated vendor port — abstract interface for third-party fulfillment partners.

Orders placed through an integrated vendor are handed to the vendor's API
at creation time instead of being dispatched to one of our drivers.
"""

from abc import ABC, abstractmethod


class VendorUnavailable(Exception):
    """The vendor API could not be reached or refused the request."""


class VendorPort(ABC):
    """Abstract interface for integrated vendor adapters."""

    @abstractmethod
    def create_order(self, vendor: str, order_ref: str, payload: dict, timeout: float) -> dict:
        """Place the order with the vendor within ``timeout`` seconds.

        Returns:
            dict with keys: vendor_order_id, status, tracking_url

        Raises:
            TimeoutError: the vendor did not answer in time.
            VendorUnavailable: the vendor rejected or could not take the request.
        """
        ...
