"""Aggregate loading shared by the order command handlers.

Every lifecycle command names its order, the tenant it acts for, and
optionally the revision it was computed against.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from fleetops.driver.driver import Driver
from fleetops.order.errors import StaleOrderRevision
from fleetops.order.order import Order
from fleetops.utils.logging import bind_order_context


def find_order(ref: str) -> Order:
    """Load an order by internal id or ``order_`` public id."""
    repo = current_domain.repository_for(Order)
    if str(ref).startswith("order_"):
        results = repo._dao.query.filter(public_id=str(ref)).all()
        if not results or not results.items:
            raise ObjectNotFoundError("Order resource not found.")
        return results.first
    try:
        return repo.get(ref)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError("Order resource not found.") from exc


def get_order(ref: str, company_id: str | None = None) -> Order:
    """Load an order visible to the given tenant."""
    order = find_order(ref)
    if company_id and order.company_id and str(order.company_id) != str(company_id):
        # Other tenants' orders are indistinguishable from missing ones
        raise ObjectNotFoundError("Order resource not found.")
    return order


def load_order(command) -> Order:
    """Load the command's order, enforcing tenant scope and the expected revision."""
    order = get_order(command.order_id, getattr(command, "company_id", None))

    expected = getattr(command, "expected_revision", None)
    if expected is not None and expected != (order.revision or 0):
        raise StaleOrderRevision(
            f"Order was modified by another request (expected revision {expected}, found {order.revision})."
        )

    bind_order_context(str(order.id), company_id=str(order.company_id) if order.company_id else None)
    return order


def load_assigned_driver(order):
    """The order's assigned driver, or None when unassigned or no longer on file."""
    if not order.driver_assigned_id:
        return None
    try:
        return current_domain.repository_for(Driver).get(order.driver_assigned_id)
    except ObjectNotFoundError:
        return None


def persist(order, *drivers) -> None:
    """Add the order and any drivers the transition touched to the unit of work."""
    current_domain.repository_for(Order).add(order)
    driver_repo = current_domain.repository_for(Driver)
    for driver in drivers:
        if driver is not None:
            driver_repo.add(driver)
