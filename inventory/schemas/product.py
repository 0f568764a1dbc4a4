from pydantic import BaseModel, Field, ConfigDict, AliasChoices, field_validator
from datetime import datetime
from typing import Optional


def _wire(name: str, wire_name: str, **kwargs):
    """Field read from either spelling and written under the wire name."""
    return Field(
        None,
        validation_alias=AliasChoices(wire_name, name),
        serialization_alias=wire_name,
        **kwargs,
    )


class ProductFields(BaseModel):
    """Every optional product column, named as on the wire."""
    name: Optional[str] = Field(None, description="Product name")
    description: Optional[str] = None
    price: Optional[float] = Field(None, description="Unit price")
    stock: Optional[int] = Field(None, description="Units on hand")
    category: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = Field(None, description="Image URL or /uploads/... path")
    status: Optional[str] = None
    brand: Optional[str] = None
    sizes: Optional[str] = None
    product_code: Optional[str] = _wire("product_code", "productCode", description="SKU")
    order_name: Optional[str] = _wire("order_name", "orderName")
    store_availability: Optional[str] = _wire("store_availability", "storeAvailability")
    file_type: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProductPayload(ProductFields):
    """
    Body of POST and PUT /products.

    Only the fields present in the request are applied on update.
    Numbers may arrive as strings; an empty string counts as absent.
    """

    @field_validator("price", "stock", "file_size", mode="before")
    @classmethod
    def blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProductRow(ProductFields):
    """A stored product as returned by GET /products."""
    id: int
    name: str
    price: float
    stock: int
    last_update: Optional[datetime] = _wire("last_update", "lastUpdate")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ProductMutationResult(BaseModel):
    """Response of create and update."""
    success: bool = True
    productId: int


class ProductDeleteResult(ProductMutationResult):
    """Response of delete."""
    message: str = "Product deleted successfully"
