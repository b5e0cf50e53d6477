"""Product API schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.product import ProductData


class ProductRequest(BaseModel):
    """Request body for POST /products and PUT /products/{id} (full replace)."""

    name: str = Field(..., min_length=1, max_length=100, description="Unique product name")
    description: str | None = Field(default=None, max_length=500)
    price: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2)

    def to_data(self) -> ProductData:
        return ProductData(name=self.name.strip(), description=self.description, price=self.price)


class ProductResponse(BaseModel):
    """Product in list/get responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    price: Decimal
