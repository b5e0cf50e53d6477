"""Order API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.application.dtos.order import OrderData, OrderItemData


class OrderItemRequest(BaseModel):
    """One order line in a request."""

    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1, le=10_000)
    unit_price: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)


class OrderRequest(BaseModel):
    """Request body for POST /orders and PUT /orders/{id}; PUT replaces all lines."""

    customer_id: int = Field(..., ge=1)
    items: list[OrderItemRequest] = Field(..., min_length=1, max_length=100)

    @field_validator("items")
    @classmethod
    def unique_products(cls, v: list[OrderItemRequest]) -> list[OrderItemRequest]:
        product_ids = [item.product_id for item in v]
        if len(set(product_ids)) != len(product_ids):
            raise ValueError("each product may appear only once per order")
        return v

    def to_data(self) -> OrderData:
        return OrderData(
            customer_id=self.customer_id,
            items=tuple(
                OrderItemData(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in self.items
            ),
        )


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    quantity: int
    unit_price: Decimal


class OrderResponse(BaseModel):
    """Order with its lines and computed total."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    order_date: datetime
    items: list[OrderItemResponse]
    total: Decimal
