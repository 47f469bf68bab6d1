"""BDD tests for the single-leg order lifecycle."""

from pytest_bdd import scenarios, when

from fleetops.order.errors import OrderLifecycleError

scenarios("features/order_lifecycle.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the order is dispatched", target_fixture="result")
def dispatch_order(order, engine, error):
    try:
        return engine.dispatch(order)
    except OrderLifecycleError as exc:
        error["exc"] = exc


@when("the driver starts the order", target_fixture="result")
def start_order(order, driver, engine, error):
    try:
        return engine.start(order, driver)
    except OrderLifecycleError as exc:
        error["exc"] = exc


@when("the driver starts the order skipping dispatch", target_fixture="result")
def start_order_skipping_dispatch(order, driver, engine):
    return engine.start(order, driver, skip_dispatch=True)


@when("the order is canceled", target_fixture="result")
def cancel_order(order, driver, engine):
    return engine.cancel_order(order, driver)
