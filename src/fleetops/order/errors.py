"""Lifecycle errors raised by the order fulfillment state machine.

Each error is a ``ValidationError`` so it travels through Protean's
command processing unchanged and keeps the usual ``messages`` envelope.
The class name doubles as the machine-readable error code.
"""

from protean.exceptions import ValidationError


class OrderLifecycleError(ValidationError):
    """Base class for rejected lifecycle commands."""

    field = "order"
    default_message = "Order lifecycle transition rejected."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__({self.field: [self.message]})

    @property
    def code(self) -> str:
        return type(self).__name__


class AlreadyDispatched(OrderLifecycleError):
    default_message = "Order has already been dispatched!"


class NoDriverAssigned(OrderLifecycleError):
    field = "driver"
    default_message = "No driver assigned to order."


class AdhocDriverRequired(OrderLifecycleError):
    field = "driver"
    default_message = "You must send driver to accept adhoc order."


class NotDispatchedYet(OrderLifecycleError):
    default_message = "Order has not been dispatched yet and cannot be started."


class AlreadyStarted(OrderLifecycleError):
    default_message = "Order has already started."


class AlreadyCompleted(OrderLifecycleError):
    default_message = "Order is already completed."


class AlreadyCanceled(OrderLifecycleError):
    default_message = "Order has been canceled."


class NoNextActivity(OrderLifecycleError):
    field = "activity"
    default_message = "No further activity is defined for this order."


class IncompleteWaypoints(OrderLifecycleError):
    field = "waypoints"
    default_message = "Not all waypoints completed for order."


class InvalidDestination(OrderLifecycleError):
    field = "destination"
    default_message = "Place resource is not a valid destination."


class StaleOrderRevision(OrderLifecycleError):
    field = "revision"
    default_message = "Order was modified by another request."


class ProofValidationFailed(OrderLifecycleError):
    field = "proof"
    default_message = "Unable to validate QR code data."


class SubjectNotResolved(OrderLifecycleError):
    field = "subject"
    default_message = "Unable to resolve proof subject."


class IntegratedVendorDispatchFailed(OrderLifecycleError):
    field = "integrated_vendor"
    default_message = "Integrated vendor did not accept the order."
