"""Order API: thin routes delegating to OrderService (cached reads)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.api.v1.dependencies import get_order_service
from app.application.services import OrderService
from app.domain.exceptions import ResourceNotFoundException
from app.schemas.order import OrderRequest, OrderResponse

router = APIRouter()

ServiceDep = Annotated[OrderService, Depends(get_order_service)]
OrderId = Annotated[int, Path(ge=1)]
CustomerId = Annotated[int, Path(ge=1)]


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    service: ServiceDep,
    page: int | None = Query(None, ge=1, description="1-based page; omit for all orders"),
):
    """List all orders, or one page of them."""
    items = await service.get_all() if page is None else await service.get_page(page)
    return [OrderResponse.model_validate(o) for o in items]


@router.get("/customer/{customer_id}", response_model=list[OrderResponse])
async def list_orders_by_customer(customer_id: CustomerId, service: ServiceDep):
    """Orders of one customer (empty list for unknown customers)."""
    items = await service.get_by_customer(customer_id)
    return [OrderResponse.model_validate(o) for o in items]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: OrderId, service: ServiceDep):
    item = await service.get_by_id(order_id)
    if item is None:
        raise ResourceNotFoundException("order", order_id)
    return OrderResponse.model_validate(item)


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(body: OrderRequest, service: ServiceDep):
    """Create an order. 422 if the customer or a product does not exist."""
    created = await service.create(body.to_data())
    return OrderResponse.model_validate(created)


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(order_id: OrderId, body: OrderRequest, service: ServiceDep):
    """Replace an order's customer and lines."""
    updated = await service.update(order_id, body.to_data())
    return OrderResponse.model_validate(updated)


@router.delete("/{order_id}", status_code=204)
async def delete_order(order_id: OrderId, service: ServiceDep) -> None:
    await service.delete(order_id)
