"""Product API: thin routes delegating to ProductService (cached reads)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.api.v1.dependencies import get_product_service
from app.application.services import ProductService
from app.domain.exceptions import ResourceNotFoundException
from app.schemas.product import ProductRequest, ProductResponse

router = APIRouter()

ServiceDep = Annotated[ProductService, Depends(get_product_service)]
ProductId = Annotated[int, Path(ge=1)]


@router.get("", response_model=list[ProductResponse])
async def list_products(
    service: ServiceDep,
    page: int | None = Query(None, ge=1, description="1-based page; omit for all products"),
):
    """List all products, or one page of them."""
    items = await service.get_all() if page is None else await service.get_page(page)
    return [ProductResponse.model_validate(p) for p in items]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: ProductId, service: ServiceDep):
    """Get product by id."""
    item = await service.get_by_id(product_id)
    if item is None:
        raise ResourceNotFoundException("product", product_id)
    return ProductResponse.model_validate(item)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(body: ProductRequest, service: ServiceDep):
    """Create a product. 409 if the name is taken."""
    created = await service.create(body.to_data())
    return ProductResponse.model_validate(created)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: ProductId, body: ProductRequest, service: ServiceDep):
    """Replace a product."""
    updated = await service.update(product_id, body.to_data())
    return ProductResponse.model_validate(updated)


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: ProductId, service: ServiceDep) -> None:
    """Delete a product. 409 while any order line references it."""
    await service.delete(product_id)
