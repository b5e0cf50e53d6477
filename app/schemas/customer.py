"""Customer API schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.application.dtos.customer import CustomerData


class CustomerRequest(BaseModel):
    """Request body for POST /customers and PUT /customers/{id}.

    Email is lowercased before the uniqueness check so 'Jane@Example.com'
    and 'jane@example.com' collide.
    """

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(
        ...,
        min_length=3,
        max_length=255,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Unique email address",
    )

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    def to_data(self) -> CustomerData:
        return CustomerData(name=self.name.strip(), email=self.email)


class CustomerResponse(BaseModel):
    """Customer in list/get responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
