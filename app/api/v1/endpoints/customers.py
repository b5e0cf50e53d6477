"""Customer API: thin routes delegating to CustomerService (cached reads)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.api.v1.dependencies import get_customer_service
from app.application.services import CustomerService
from app.domain.exceptions import ResourceNotFoundException
from app.schemas.customer import CustomerRequest, CustomerResponse

router = APIRouter()

ServiceDep = Annotated[CustomerService, Depends(get_customer_service)]
CustomerId = Annotated[int, Path(ge=1)]


@router.get("", response_model=list[CustomerResponse])
async def list_customers(
    service: ServiceDep,
    page: int | None = Query(None, ge=1, description="1-based page; omit for all customers"),
):
    """List all customers, or one page of them."""
    items = await service.get_all() if page is None else await service.get_page(page)
    return [CustomerResponse.model_validate(c) for c in items]


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: CustomerId, service: ServiceDep):
    item = await service.get_by_id(customer_id)
    if item is None:
        raise ResourceNotFoundException("customer", customer_id)
    return CustomerResponse.model_validate(item)


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(body: CustomerRequest, service: ServiceDep):
    """Create a customer. 409 if the email is taken."""
    created = await service.create(body.to_data())
    return CustomerResponse.model_validate(created)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(customer_id: CustomerId, body: CustomerRequest, service: ServiceDep):
    updated = await service.update(customer_id, body.to_data())
    return CustomerResponse.model_validate(updated)


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(customer_id: CustomerId, service: ServiceDep) -> None:
    """Delete a customer together with their orders."""
    await service.delete(customer_id)
