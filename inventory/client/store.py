"""
Client-side product state.

``ProductStore`` holds the loaded catalog, the loading/error flags and the
two list filters. It is an ordinary object: construct one per screen tree
(or per test) and pass it to whatever renders it.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from inventory.client.api import InventoryClient
from inventory.client.models import Product, is_low_stock
from inventory.exceptions import InventoryError

logger = logging.getLogger(__name__)


def placeholder_catalog() -> list[Product]:
    """Fixed single-item catalog shown when the product list can't be fetched."""
    now = datetime.now(timezone.utc).isoformat()
    return [
        Product(
            id="1",
            name='MacBook Pro 16"',
            description="Apple M3 Max chip",
            price=89900,
            stock=3,
            sku="MBP-M3-16",
            image_url="https://images.unsplash.com/photo-1517336714731-489689fd1ca8?w=400",
            created_at=now,
            updated_at=now,
        )
    ]


class ProductStore:
    """
    Product list plus UI filters, backed by an ``InventoryClient``.

    Every network operation clears ``error`` and sets ``loading`` first, and
    always resets ``loading`` when it finishes. Overlapping calls are not
    de-duplicated; the last one to finish wins.
    """

    def __init__(self, client: InventoryClient):
        self.client = client
        self.products: list[Product] = []
        self.loading = False
        self.error: Optional[str] = None
        self.search_query = ""
        self.show_low_stock_only = False

    def _begin(self) -> None:
        self.loading = True
        self.error = None

    async def refresh(self) -> None:
        """
        Reload the catalog.

        On failure the list is replaced by the placeholder catalog and
        ``error`` explains why; nothing is raised.
        """
        self._begin()
        try:
            products = await self.client.list_products()
        except InventoryError as e:
            logger.warning(f"Fetch products failed, using placeholder catalog: {e}")
            self.products = placeholder_catalog()
            self.error = f"API Error: {e.message}. Using mock data."
        else:
            self.products = list(products)
            logger.info(f"Products loaded: {len(self.products)} items")
        finally:
            self.loading = False

    def lookup(self, product_id: str) -> Optional[Product]:
        """Find a loaded product without touching the network. None if absent."""
        return next((p for p in self.products if p.id == product_id), None)

    async def create(self, data: Mapping[str, Any]) -> Product:
        """Create a product and put it first in the list."""
        self._begin()
        try:
            product = await self.client.create_product(data)
        except InventoryError as e:
            self.error = e.message or "Failed to add product"
            raise
        else:
            self.products = [product, *self.products]
            return product
        finally:
            self.loading = False

    async def update(self, product_id: str, data: Mapping[str, Any]) -> Product:
        """Update a product, replacing it in place."""
        self._begin()
        try:
            product = await self.client.update_product(product_id, data)
        except InventoryError as e:
            self.error = e.message or "Failed to update product"
            raise
        else:
            self.products = [product if p.id == product_id else p for p in self.products]
            return product
        finally:
            self.loading = False

    async def remove(self, product_id: str) -> None:
        """Delete a product and drop it from the list."""
        self._begin()
        try:
            await self.client.delete_product(product_id)
        except InventoryError as e:
            logger.error(f"Delete error for product {product_id}: {e}")
            self.error = e.message or "Failed to delete product"
            raise
        else:
            self.products = [p for p in self.products if p.id != product_id]
            logger.info(f"Product deleted: {product_id}")
        finally:
            self.loading = False

    def set_query(self, text: str) -> None:
        self.search_query = text

    def toggle_low_stock_only(self) -> None:
        self.show_low_stock_only = not self.show_low_stock_only

    def filtered_view(self) -> list[Product]:
        """
        Products matching the current filters, computed on each call.

        The search query matches name, description or SKU
        (case-insensitive substring); the low-stock toggle keeps products
        with fewer than 5 units. Both apply together.
        """
        filtered = self.products

        query = self.search_query.strip().lower()
        if query:
            filtered = [
                p for p in filtered
                if query in p.name.lower()
                or query in p.description.lower()
                or query in p.sku.lower()
            ]

        if self.show_low_stock_only:
            filtered = [p for p in filtered if is_low_stock(p.stock)]

        return list(filtered)
