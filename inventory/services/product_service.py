from sqlalchemy.orm import Session
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import func
from typing import Optional, List
import logging

from inventory.exceptions import InventoryError, NotFoundError, ConflictError, ValidationError
from inventory.models.product import Product
from inventory.schemas.product import ProductPayload
from inventory.utils.storage import FileStorage, filename_from_url
from inventory.validation import validate_product

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "Active"


class ProductService:
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating, reading, updating and deleting product rows
    - Server-side validation of every write
    - Best-effort removal of uploaded files a product no longer references
    """

    def __init__(self, db: Session, storage: FileStorage, origin: Optional[str] = None):
        self.db = db
        self.storage = storage
        self.origin = origin

    def create(self, payload: ProductPayload) -> Product:
        """
        Create a new product.

        Args:
            payload: Product fields from the request body

        Returns:
            Created product instance

        Raises:
            ValidationError: If name is missing or a number is out of range
        """
        data = payload.model_dump(exclude_none=True)
        self._validate(data)

        product = Product(**data)
        product.price = data.get("price", 0)
        product.stock = data.get("stock", 0)
        product.status = data.get("status") or DEFAULT_STATUS

        try:
            self.db.add(product)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating product: {e}")
            raise InventoryError("Failed to create product")

        self.db.refresh(product)
        logger.info(f"Product created: {product.name} (ID: {product.id})")
        return product

    def get_by_id(self, product_id: int) -> Product:
        """
        Get a product by ID.

        Raises:
            NotFoundError: If no row has this ID
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def get_all(self, search: Optional[str] = None) -> List[Product]:
        """
        List products, most recently updated first.

        Args:
            search: Optional case-insensitive substring of the name
        """
        query = self.db.query(Product)

        if search:
            query = query.filter(Product.name.ilike(f"%{search}%"))

        return query.order_by(Product.last_update.desc(), Product.id.desc()).all()

    def update(self, product_id: int, payload: ProductPayload) -> Product:
        """
        Update an existing product.

        Only fields present in the request are changed. The merged row must
        still pass validation. When ``image`` changes, the upload that backed
        the old image is removed after the row is saved.

        Raises:
            NotFoundError: If the product doesn't exist
            ValidationError: If the merged row is invalid
        """
        product = self.get_by_id(product_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("price", 0) is None:
            changes["price"] = 0
        if changes.get("stock", 0) is None:
            changes["stock"] = 0
        if not changes.get("status", DEFAULT_STATUS):
            changes["status"] = DEFAULT_STATUS

        merged = {"name": product.name, "price": product.price, "stock": product.stock}
        merged.update(changes)
        self._validate(merged)

        stale_file = None
        if "image" in changes and product.image and not self._same_image(product.image, changes["image"]):
            stale_file = self._stored_filename(product)

        for field, value in changes.items():
            setattr(product, field, value)
        product.last_update = func.now()

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating product #{product_id}: {e}")
            raise InventoryError("Failed to update product")

        self.db.refresh(product)

        if stale_file:
            self.storage.delete(stale_file)

        logger.info(f"Product updated: {product.name} (ID: {product_id})")
        return product

    def delete(self, product_id: int) -> None:
        """
        Delete a product and, best effort, its uploaded file.

        The row is looked up first to learn which file to remove; the delete
        statement's affected-row count is still checked.

        Raises:
            NotFoundError: If the product doesn't exist or vanished meanwhile
            ConflictError: If other records still reference the product
        """
        product = self.get_by_id(product_id)
        stale_file = self._stored_filename(product)

        try:
            result = self.db.execute(delete(Product).where(Product.id == product_id))
            if result.rowcount == 0:
                self.db.rollback()
                raise NotFoundError("Product not found or already deleted")
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error deleting product #{product_id}: {e}")
            raise ConflictError("Cannot delete product: referenced by other records")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting product #{product_id}: {e}")
            raise InventoryError("Failed to delete product")

        if stale_file and not self.storage.delete(stale_file):
            logger.warning(f"File deletion failed for product #{product_id} (non-critical)")

        logger.info(f"Product deleted successfully: ID {product_id}")

    def _stored_filename(self, product: Product) -> Optional[str]:
        """Name of the uploaded file backing the product's image, if any."""
        return product.file_name or filename_from_url(product.image, self.origin)

    def _same_image(self, old: str, new: Optional[str]) -> bool:
        """Whether two image URLs point at the same picture, absolute or not."""
        if old == new:
            return True
        old_name = filename_from_url(old, self.origin)
        return old_name is not None and old_name == filename_from_url(new, self.origin)

    @staticmethod
    def _validate(data: dict) -> None:
        errors = validate_product(data)
        if errors:
            raise ValidationError(errors[0].message, errors)
