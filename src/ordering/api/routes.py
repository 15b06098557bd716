"""FastAPI routes for the Ordering domain: checkout, orders and driver work lists."""

import json

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AssignDriverRequest,
    ChangePhoneRequest,
    ManualPaymentOrderRequest,
    OpenCheckoutRequest,
    OrderIdResponse,
    PaymentStartedResponse,
    PayRequest,
    PreviewResponse,
    StatusResponse,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    VerifyPhoneRequest,
)
from ordering.cart.store import CartLine, CartStore, InMemoryCartPersistence
from ordering.checkout.orchestrator import CheckoutOrchestrator, CustomerDetails
from ordering.checkout.sessions import get_checkout_sessions
from ordering.order.assignment import AssignDriver
from ordering.order.placement import PlaceManualPaymentOrder
from ordering.order.queries import get_order, lookup_order, orders_for_customer, orders_for_driver
from ordering.order.status import UpdateOrderStatus, UpdatePaymentStatus
from shared.auth import Principal, current_principal, require_admin, require_driver

# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201)
async def open_checkout(body: OpenCheckoutRequest, principal: Principal = Depends(current_principal)) -> dict:
    cart = CartStore(InMemoryCartPersistence([line.model_dump() for line in body.items]))
    entry = get_checkout_sessions().open(CheckoutOrchestrator(cart=cart, principal=principal))
    return entry.to_dict()


@checkout_router.get("/{checkout_id}")
async def get_checkout(checkout_id: str, principal: Principal = Depends(current_principal)) -> dict:
    return get_checkout_sessions().get(checkout_id, principal.user_id).to_dict()


@checkout_router.post("/{checkout_id}/verify-phone", response_model=PreviewResponse)
async def verify_phone(
    checkout_id: str, body: VerifyPhoneRequest, principal: Principal = Depends(current_principal)
) -> PreviewResponse:
    orchestrator = get_checkout_sessions().get(checkout_id, principal.user_id).orchestrator
    result = await orchestrator.verify_phone(body.phone)
    return PreviewResponse(
        order_reference=orchestrator.session.order_reference,
        methods=[method.to_dict() for method in result.methods],
        sender=result.sender,
    )


@checkout_router.post("/{checkout_id}/change-phone", response_model=StatusResponse)
async def change_phone(
    checkout_id: str, body: ChangePhoneRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    get_checkout_sessions().get(checkout_id, principal.user_id).orchestrator.change_phone(body.phone)
    return StatusResponse()


@checkout_router.post("/{checkout_id}/pay", status_code=202, response_model=PaymentStartedResponse)
async def pay(
    checkout_id: str, body: PayRequest, principal: Principal = Depends(current_principal)
) -> PaymentStartedResponse:
    sessions = get_checkout_sessions()
    entry = sessions.get(checkout_id, principal.user_id)
    transaction_id = await entry.orchestrator.start_payment(CustomerDetails(**body.customer.model_dump()))
    sessions.finish_in_background(entry)
    return PaymentStartedResponse(
        checkout_id=checkout_id,
        order_reference=entry.orchestrator.session.order_reference,
        transaction_id=transaction_id,
        state=entry.state,
    )


@checkout_router.delete("/{checkout_id}", response_model=StatusResponse)
async def cancel_checkout(checkout_id: str, principal: Principal = Depends(current_principal)) -> StatusResponse:
    get_checkout_sessions().close(checkout_id, principal.user_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/manual", status_code=201, response_model=OrderIdResponse)
async def place_manual_payment_order(
    body: ManualPaymentOrderRequest, principal: Principal = Depends(current_principal)
) -> OrderIdResponse:
    command = PlaceManualPaymentOrder(
        customer_id=principal.user_id,
        account_email=principal.email,
        customer_name=body.customer.name,
        customer_email=body.customer.email,
        customer_phone=body.customer.phone,
        shipping_address=body.customer.shipping_address,
        items=json.dumps([CartLine(**line.model_dump()).to_dict() for line in body.items]),
        payment_method=body.payment_method,
        transaction_id=body.transaction_id,
        payment_proof_url=body.payment_proof_url,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("/lookup")
async def lookup(order_id: str, phone: str) -> dict:
    """Public status lookup; no sign-in required."""
    return lookup_order(order_id, phone)


@order_router.get("")
async def my_orders(principal: Principal = Depends(current_principal)) -> list[dict]:
    return [order.to_dict() for order in orders_for_customer(principal.user_id)]


@order_router.get("/{order_id}")
async def get_order_detail(order_id: str, principal: Principal = Depends(current_principal)) -> dict:
    order = get_order(order_id)
    visible_to = {str(order.customer_id or ""), str(order.driver_id or "")}
    if not principal.capabilities.is_admin and principal.user_id not in visible_to:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return order.to_dict()


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    require_admin(principal)
    current_domain.process(UpdateOrderStatus(order_id=order_id, order_status=body.order_status), asynchronous=False)
    return StatusResponse()


@order_router.put("/{order_id}/payment-status", response_model=StatusResponse)
async def update_payment_status(
    order_id: str, body: UpdatePaymentStatusRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    require_admin(principal)
    current_domain.process(
        UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status), asynchronous=False
    )
    return StatusResponse()


@order_router.put("/{order_id}/driver", response_model=StatusResponse)
async def assign_driver(
    order_id: str, body: AssignDriverRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    require_admin(principal)
    current_domain.process(AssignDriver(order_id=order_id, driver_id=body.driver_id or None), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Driver Router
# ---------------------------------------------------------------------------
driver_router = APIRouter(prefix="/driver", tags=["driver"])


@driver_router.get("/orders")
async def assigned_orders(principal: Principal = Depends(current_principal)) -> list[dict]:
    require_driver(principal)
    return [order.to_dict() for order in orders_for_driver(principal.user_id)]
