"""FleetOps API package."""

from fleetops.api.errors import register_error_handlers
from fleetops.api.routes import driver_router, order_router

__all__ = ["order_router", "driver_router", "register_error_handlers"]
