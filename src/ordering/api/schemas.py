"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    product_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    selected_variant: str | None = None
    image: str | None = None


class CustomerDetailsSchema(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=1)
    shipping_address: str = Field(min_length=1)


class PaymentMethodSchema(BaseModel):
    name: str
    availability: str
    fee: float | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class OpenCheckoutRequest(BaseModel):
    items: list[CartLineSchema]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {
                            "product_id": "prod-001",
                            "name": "Tempered Glass",
                            "price": 12500,
                            "quantity": 2,
                            "selected_variant": "iPhone 15",
                        }
                    ]
                }
            ]
        }
    }


class VerifyPhoneRequest(BaseModel):
    phone: str = Field(min_length=1)


class ChangePhoneRequest(BaseModel):
    phone: str | None = None


class PayRequest(BaseModel):
    customer: CustomerDetailsSchema


class PreviewResponse(BaseModel):
    order_reference: str
    methods: list[PaymentMethodSchema]
    sender: dict | None = None


class PaymentStartedResponse(BaseModel):
    checkout_id: str
    order_reference: str
    transaction_id: str
    state: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ManualPaymentOrderRequest(BaseModel):
    customer: CustomerDetailsSchema
    items: list[CartLineSchema]
    payment_method: str = Field(min_length=1)
    transaction_id: str | None = None
    payment_proof_url: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    order_status: str


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str


class AssignDriverRequest(BaseModel):
    driver_id: str | None = None


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
