from typing import Any, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field

# Products with fewer units than this are "low stock"
LOW_STOCK_THRESHOLD = 5


def is_low_stock(stock: int) -> bool:
    return stock < LOW_STOCK_THRESHOLD


class Product(BaseModel):
    """
    Canonical client-side product.

    ``created_at`` and ``updated_at`` both come from the single persisted
    timestamp, so they are always equal after a fetch.
    """
    id: str
    name: str
    description: str = ""
    price: float = 0.0
    stock: int = 0
    sku: str = ""
    image_url: str = ""
    created_at: str
    updated_at: str

    @property
    def is_low_stock(self) -> bool:
        return is_low_stock(self.stock)


class ProductDraft(TypedDict, total=False):
    """Fields a user can set when adding or editing a product."""
    name: str
    description: str
    price: float
    stock: int
    sku: str
    image_url: str


class WireProduct(BaseModel):
    """A product row exactly as the API sends it. Every field is optional."""
    id: Any = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Any = None
    stock: Any = None
    category: Optional[str] = None
    location: Optional[str] = None
    image: Optional[str] = None
    status: Optional[str] = None
    brand: Optional[str] = None
    sizes: Optional[str] = None
    product_code: Optional[str] = Field(None, alias="productCode")
    order_name: Optional[str] = Field(None, alias="orderName")
    store_availability: Optional[str] = Field(None, alias="storeAvailability")
    file_type: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Any = None
    last_update: Optional[str] = Field(None, alias="lastUpdate")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
